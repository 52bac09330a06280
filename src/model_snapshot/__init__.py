"""
model-snapshot: export, import and chain fitted marketing-mix models.

Persists one fitted model -- its input configuration and a selected
solution -- as a self-contained JSON file, restores it, and rebuilds
the whole lineage of models produced by successive refreshes.

Quickstart::

    from model_snapshot import write_model, read_model, walk_chain
    artifact = write_model(InputCollect, OutputCollect, select_model="1_29_12")
    restored = read_model(artifact.json_file, step=2)
    chain = walk_chain("Robyn_init/Robyn_rf1/RobynModel-2_10_3.json")
"""

from model_snapshot.core import (
    Artifact,
    Chain,
    build_snapshot,
    read_model,
    recreate_model,
    walk_chain,
    write_model,
)

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "Chain",
    "build_snapshot",
    "read_model",
    "recreate_model",
    "walk_chain",
    "write_model",
]

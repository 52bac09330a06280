"""
Core module for model-snapshot.

Provides the model file contracts, the snapshot filter, the JSON
writer and reader, refresh-chain reconstruction, and model recreation.
"""

from model_snapshot.core.contracts import (
    Artifact,
    ArtifactSource,
    Chain,
    ChainLink,
    ChainStatus,
    ErrorMetrics,
    ExportedModel,
    InputSpec,
    SummaryRow,
)
from model_snapshot.core.filters import Snapshot, build_snapshot
from model_snapshot.core.artifacts import model_file_path, read_model, write_model
from model_snapshot.core.chain import PrefixSessionResolver, SessionPathResolver, walk_chain
from model_snapshot.core.recreate import Recreation, recreate_model
from model_snapshot.core.exceptions import (
    SnapshotError,
    UnknownModelIdError,
    InvalidExtensionError,
    ArtifactNotFoundError,
    MissingSectionError,
    ChainAnchorError,
    ArtifactSchemaError,
    ChainIntegrityError,
    ChainLengthMismatchError,
)

__all__ = [
    "Artifact",
    "ArtifactSource",
    "Chain",
    "ChainLink",
    "ChainStatus",
    "ErrorMetrics",
    "ExportedModel",
    "InputSpec",
    "SummaryRow",
    "Snapshot",
    "build_snapshot",
    "model_file_path",
    "read_model",
    "write_model",
    "PrefixSessionResolver",
    "SessionPathResolver",
    "walk_chain",
    "Recreation",
    "recreate_model",
    "SnapshotError",
    "UnknownModelIdError",
    "InvalidExtensionError",
    "ArtifactNotFoundError",
    "MissingSectionError",
    "ChainAnchorError",
    "ArtifactSchemaError",
    "ChainIntegrityError",
    "ChainLengthMismatchError",
]

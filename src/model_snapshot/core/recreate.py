"""
Replay a stored model through the input-building and fitting steps.

Both steps are supplied by the caller: this package only restores
files, it never builds inputs or fits models itself.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, NamedTuple

from loguru import logger

from model_snapshot.core.artifacts import read_model


class Recreation(NamedTuple):
    input_collect: Any
    output_collect: Any


def recreate_model(
    json_file: Path | str,
    build_inputs: Callable[..., Any],
    run_model: Callable[..., Any],
    quiet: bool = False,
    **kwargs: Any,
) -> Recreation:
    """
    Rebuild the inputs and outputs of an exported model.

    Args:
        json_file:    Model file with an ``ExportedModel`` section.
        build_inputs: Called as ``build_inputs(json_file=..., quiet=..., **kwargs)``;
                      restores the input configuration from the file.
        run_model:    Called as ``run_model(input_collect=..., json_file=...,
                      export=False, quiet=..., **kwargs)``; refits the
                      stored solution without writing a new file.
        quiet:        Passed through to both steps.
        **kwargs:     Passed through to both steps.

    Errors raised by either step propagate unchanged.
    """
    json_file = str(json_file)
    artifact = read_model(json_file, step=2, quiet=True)
    logger.info(f">>> Recreating model {artifact.model_id}")

    input_collect = build_inputs(json_file=json_file, quiet=quiet, **kwargs)
    output_collect = run_model(
        input_collect=input_collect,
        json_file=json_file,
        export=False,
        quiet=quiet,
        **kwargs,
    )
    return Recreation(input_collect=input_collect, output_collect=output_collect)

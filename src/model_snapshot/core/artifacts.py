"""
Model file writer and reader.

A model file is one pretty-printed JSON document::

    {
      "InputCollect":  {...},   -- filtered input configuration
      "ExportedModel": {...}    -- selected model outputs (optional)
    }

named ``RobynModel-<selector>.json`` where ``<selector>`` is the
exported model id, or ``inputs`` for a configuration-only export.

Writing the same snapshot twice produces byte-identical files: nothing
time-dependent is embedded and every mapping is emitted in a stable
order.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from loguru import logger
from pydantic import ValidationError

from model_snapshot.config import get_config
from model_snapshot.core.contracts import Artifact, ArtifactSource, ExportedModel, InputSpec
from model_snapshot.core.exceptions import (
    ArtifactNotFoundError,
    ArtifactSchemaError,
    InvalidExtensionError,
    MissingSectionError,
)
from model_snapshot.core.filters import build_snapshot


INPUTS_SECTION = "InputCollect"
MODEL_SECTION = "ExportedModel"


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

def write_model(
    input_collect: Any,
    output_collect: Any = None,
    select_model: str | None = None,
    dir: Path | str | None = None,
    export: bool = True,
    quiet: bool = False,
) -> Artifact:
    """
    Export a model's inputs, and optionally one fitted solution, to JSON.

    Args:
        input_collect:  The model's input configuration.
        output_collect: The fitted result.  Omit to export inputs only.
        select_model:   Which solution to export.
        dir:            Target directory.  Defaults to the result's
                        ``plot_folder``, then the working directory.
        export:         When False nothing touches the disk; the returned
                        artifact still carries the path it would use.
        quiet:          Suppress the confirmation message.

    Returns:
        The written ``Artifact``.
    """
    snapshot = build_snapshot(input_collect, output_collect, select_model)
    exported = snapshot.exported_model

    if dir is None:
        dir = exported.plot_folder if exported is not None and exported.plot_folder else Path.cwd()
    target = Path(dir).expanduser()

    selector = exported.select_model if exported is not None else "inputs"
    artifact = Artifact(
        input_collect=snapshot.input_collect,
        exported_model=exported,
        json_file=model_file_path(target, selector),
        source=ArtifactSource.WRITTEN,
    )

    if export:
        target.mkdir(parents=True, exist_ok=True)
        if not quiet:
            logger.info(f">> Exported model {selector} as {artifact.json_file}")
        save_json(artifact.json_file, artifact.to_json_dict())
    return artifact


def model_file_path(directory: Path | str, selector: str) -> str:
    """``<directory>/<prefix>-<selector>.json`` with doubled slashes collapsed."""
    prefix = get_config().format.file_prefix
    return re.sub(r"/{2,}", "/", f"{directory}/{prefix}-{selector}.json")


def save_json(path: Path | str, data: Any) -> Path:
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=get_config().format.json_indent, default=_json_default)
        f.write("\n")
    return path


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

def read_model(json_file: Path | str, step: int = 1, quiet: bool = False) -> Artifact:
    """
    Import a model file.

    Args:
        json_file: Path to a ``.json`` model file.
        step:      1 to import inputs only, 2 to import inputs and the
                   exported model (the file must then contain one).
        quiet:     Suppress the confirmation message.

    Raises:
        InvalidExtensionError: *json_file* is not a ``.json`` file.
        ArtifactNotFoundError: *json_file* does not exist.
        MissingSectionError:   The section required by *step* is absent.
        ArtifactSchemaError:   The file is not a valid model file.
    """
    if step not in (1, 2):
        raise ValueError(f"step must be 1 or 2, got {step}")

    path = str(Path(json_file).expanduser())
    if Path(path).suffix.lower() != ".json":
        raise InvalidExtensionError(path)
    if not Path(path).exists():
        raise ArtifactNotFoundError(path)

    data = load_json(path)

    inputs = data.get(INPUTS_SECTION)
    if isinstance(inputs, dict):
        inputs = {k: v for k, v in inputs.items() if not _is_empty(v)}
    if inputs is None and step == 1:
        raise MissingSectionError(INPUTS_SECTION, path)
    if data.get(MODEL_SECTION) is None and step == 2:
        raise MissingSectionError(MODEL_SECTION, path)

    try:
        input_spec = InputSpec.model_validate(inputs or {})
        exported = None
        if data.get(MODEL_SECTION) is not None:
            exported = ExportedModel.model_validate(data[MODEL_SECTION])
    except ValidationError as exc:
        raise ArtifactSchemaError(f"JSON file is not a valid model file: {path}\n{exc}", path=path) from exc

    artifact = Artifact(
        input_collect=input_spec,
        exported_model=exported,
        json_file=path,
        source=ArtifactSource.READ,
    )
    if not quiet:
        logger.info(f"Imported JSON file successfully: {path}")
    return artifact


def load_json(path: Path | str) -> dict[str, Any]:
    """Parse a JSON document whose top level is an object."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ArtifactSchemaError(f"JSON file can't be parsed: {path} ({exc})", path=str(path)) from exc
    if not isinstance(data, dict):
        raise ArtifactSchemaError(f"JSON file must contain an object at the top level: {path}", path=str(path))
    return data


# ---------------------------------------------------------------------------
# Private utilities
# ---------------------------------------------------------------------------

def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict)) and len(value) == 0)


def _json_default(obj: Any) -> Any:
    """JSON fallback serialiser for numpy and pandas types."""
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)

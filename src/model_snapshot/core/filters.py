"""
Snapshot filter: reduce live model objects to the exportable shape.

``InputCollect`` and ``OutputCollect`` are whatever the input-building
and model-fitting steps hand back -- plain dicts, Pydantic models, or
simple attribute bags.  Only flat fields survive the filter: nested
structures (mappings, data frames, lists of records) and empty or null
values are dropped, except for the InputCollect fields listed in
``FormatConfig.keep_input_fields``, which carry meaningful structure
and are exported verbatim.

From ``OutputCollect`` the filter computes, for the selected model:

    summary       -- xDecompAgg rows, with ROI or CPA as "performance"
    errors        -- fit errors from resultHypParam
    hyper_values  -- realised hyperparameters, sorted by name
    hyper_updated -- the configured hyperparameter space, unchanged
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import PurePath
from typing import Any, NamedTuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, ValidationError

from model_snapshot.config import get_config
from model_snapshot.core.contracts import ExportedModel, InputSpec
from model_snapshot.core.exceptions import ArtifactSchemaError, UnknownModelIdError


SUMMARY_COLUMNS = {
    "rn": "variable",
    "coef": "coef",
    "xDecompPerc": "decompPer",
    "xDecompAggRF": "decompAgg",
    "performance": "performance",
    "mean_response": "mean_response",
    "mean_spend": "mean_spend",
}

ERROR_COLUMNS = ["rsq_train", "nrmse", "decomp.rssd", "mape"]

JSON_SCALARS = (str, int, float, bool)

# OutputCollect fields that are computed explicitly or never exported
OUTPUT_SKIP = {"allSolutions", "select_model", "summary", "errors", "hyper_values", "hyper_updated"}


class Snapshot(NamedTuple):
    """Filtered, validated content of a model file."""

    input_collect: InputSpec
    exported_model: ExportedModel | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_snapshot(
    input_collect: Any,
    output_collect: Any = None,
    select_model: str | None = None,
) -> Snapshot:
    """
    Build the canonical snapshot of a model.

    Args:
        input_collect:  The model's input configuration.
        output_collect: The fitted result; omit for an inputs-only export.
        select_model:   Solution id to export.  May be omitted when the
                        result holds exactly one solution.

    Raises:
        UnknownModelIdError: The selected id is not one of the result's
            solutions.
        ArtifactSchemaError: The filtered fields do not fit the file schema.
    """
    fmt = get_config().format
    inputs = filter_fields(_fields(input_collect), keep=fmt.keep_input_fields)
    input_spec = _validate(InputSpec, inputs, "InputCollect")

    if output_collect is None:
        return Snapshot(input_spec)

    outputs = _fields(output_collect)
    select_model = resolve_model_id(outputs.get("allSolutions"), select_model)

    exported: dict[str, Any] = {"select_model": select_model}
    exported["summary"] = summary_records(outputs.get("xDecompAgg"), select_model, input_spec.is_revenue)

    hyp_row = _solution_row(outputs.get("resultHypParam"), select_model)
    exported["errors"] = error_record(hyp_row)
    exported["hyper_values"] = hyper_values(hyp_row, fmt.hyper_suffixes, fmt.regularization_param)

    if outputs.get("hyper_updated") is not None:
        exported["hyper_updated"] = _to_jsonable(outputs["hyper_updated"])

    extra = filter_fields({k: v for k, v in outputs.items() if k not in OUTPUT_SKIP})
    exported.update({k: v for k, v in extra.items() if not isinstance(v, list)})

    return Snapshot(input_spec, _validate(ExportedModel, exported, "ExportedModel"))


def resolve_model_id(all_solutions: Any, select_model: str | None) -> str:
    """Return the id to export, defaulting to the only solution if there is one."""
    solutions = [str(s) for s in _as_list(all_solutions)]
    if select_model is None and len(solutions) == 1:
        return solutions[0]
    if select_model is None or str(select_model) not in solutions:
        raise UnknownModelIdError(select_model, solutions)
    return str(select_model)


def filter_fields(fields: Mapping[str, Any], keep: list[str] | tuple[str, ...] = ()) -> dict[str, Any]:
    """
    Drop null, empty, and nested-structure fields.

    Fields named in *keep* are retained (converted to plain JSON types)
    whatever their shape, as long as they are not null.  Other fields
    survive only as JSON scalars or flat lists of them; arbitrary objects
    are dropped, since their text form is not stable between runs.
    """
    out: dict[str, Any] = {}
    for name, value in fields.items():
        if name in keep:
            if value is not None:
                out[name] = _to_jsonable(value)
            continue
        if value is None or _is_structured(value):
            continue
        value = _to_jsonable(value)
        if value is None or (isinstance(value, list) and not value):
            continue
        if not _is_json_value(value):
            continue
        out[name] = value
    return out


# ---------------------------------------------------------------------------
# ExportedModel pieces
# ---------------------------------------------------------------------------

def summary_records(x_decomp_agg: Any, select_model: str, is_revenue: bool) -> list[dict[str, Any]]:
    """Summary rows of the selected model, with ROI or CPA as performance."""
    df = _frame(x_decomp_agg)
    if df.empty or "solID" not in df.columns:
        return []
    rows = df.loc[df["solID"].astype(str) == select_model].copy()
    metric = "roi_total" if is_revenue else "cpa_total"
    rows["performance"] = rows[metric] if metric in rows.columns else np.nan
    rows = rows.reindex(columns=list(SUMMARY_COLUMNS)).rename(columns=SUMMARY_COLUMNS)
    return _records(rows)


def error_record(hyp_row: pd.DataFrame) -> dict[str, Any] | None:
    if hyp_row.empty:
        return None
    return _records(hyp_row.reindex(columns=ERROR_COLUMNS))[0]


def hyper_values(
    hyp_row: pd.DataFrame,
    suffixes: list[str],
    regularization_param: str = "lambda",
) -> dict[str, Any]:
    """
    Realised hyperparameters of the selected model.

    Keeps columns ending in one of *suffixes* plus the regularisation
    parameter, in alphabetical order so repeated exports diff cleanly.
    """
    if hyp_row.empty:
        return {}
    names = sorted(
        c for c in hyp_row.columns
        if str(c).endswith(tuple(suffixes)) or c == regularization_param
    )
    row = hyp_row.iloc[0]
    return {name: _to_jsonable(row[name]) for name in names}


# ---------------------------------------------------------------------------
# Internal
# ---------------------------------------------------------------------------

def _fields(obj: Any) -> dict[str, Any]:
    """Shallow field mapping of a dict, Pydantic model, or plain object."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, BaseModel):
        return dict(obj)
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Can't export fields of {type(obj).__name__}")


def _validate(model: type[BaseModel], data: dict[str, Any], section: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ArtifactSchemaError(f"{section} can't be exported: {exc}") from exc


def _solution_row(table: Any, select_model: str) -> pd.DataFrame:
    df = _frame(table)
    if df.empty or "solID" not in df.columns:
        return df.iloc[0:0]
    return df.loc[df["solID"].astype(str) == select_model]


def _frame(table: Any) -> pd.DataFrame:
    if table is None:
        return pd.DataFrame()
    if isinstance(table, pd.DataFrame):
        return table
    return pd.DataFrame(table)


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame rows as plain dicts, with missing values as None."""
    return [
        {k: _to_jsonable(v) for k, v in row.items()}
        for row in df.astype(object).where(df.notna(), None).to_dict(orient="records")
    ]


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        return [value]
    if isinstance(value, (pd.Series, np.ndarray, pd.Index)):
        return list(value.tolist())
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _is_structured(value: Any) -> bool:
    if isinstance(value, (Mapping, pd.DataFrame, BaseModel)):
        return True
    if isinstance(value, (list, tuple)):
        return any(isinstance(v, (Mapping, list, tuple, pd.DataFrame, BaseModel)) for v in value)
    return False


def _is_json_value(value: Any) -> bool:
    if isinstance(value, list):
        return all(v is None or isinstance(v, JSON_SCALARS) for v in value)
    return isinstance(value, JSON_SCALARS)


def _to_jsonable(value: Any) -> Any:
    """Convert numpy / pandas / path values into plain JSON types."""
    if isinstance(value, pd.DataFrame):
        return _records(value)
    if isinstance(value, BaseModel):
        return _to_jsonable(value.model_dump())
    if isinstance(value, Mapping):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (pd.Series, np.ndarray, pd.Index)):
        return [_to_jsonable(v) for v in value.tolist()]
    if isinstance(value, set):
        return [_to_jsonable(v) for v in sorted(value, key=str)]
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, PurePath):
        return str(value)
    return value

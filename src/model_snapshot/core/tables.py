"""Tabular views of a model file for inspection."""

from __future__ import annotations

from typing import Any

import pandas as pd

from model_snapshot.config import get_config
from model_snapshot.core.contracts import Artifact


def summary_frame(artifact: Artifact) -> pd.DataFrame:
    """The exported model's per-variable summary as a DataFrame."""
    if artifact.exported_model is None:
        return pd.DataFrame()
    return pd.DataFrame([row.model_dump() for row in artifact.exported_model.summary])


def hyper_table(hyper_values: dict[str, Any]) -> pd.DataFrame:
    """
    Pivot ``<channel>_<param>`` hyperparameter values into one row per channel.

    The regularisation parameter is not channel-specific and is left out.
    """
    suffixes = get_config().format.hyper_suffixes
    records = []
    for key, value in hyper_values.items():
        for suffix in suffixes:
            if key.endswith(f"_{suffix}"):
                records.append({"channel": key[: -len(suffix) - 1], "hyperparameter": suffix, "value": value})
                break
    if not records:
        return pd.DataFrame(columns=["channel"])

    df = pd.DataFrame(records).pivot(index="channel", columns="hyperparameter", values="value")
    df = df.reset_index()
    df.columns.name = None
    return df


def errors_line(artifact: Artifact) -> str:
    """One-line digest of the exported model's fit errors."""
    errors = artifact.exported_model.errors if artifact.exported_model else None
    if errors is None:
        return "No errors recorded"

    def _fmt(x: float | None) -> str:
        return "-" if x is None else f"{x:.4g}"

    return (
        f"R2 (train): {_fmt(errors.rsq_train)} | NRMSE = {_fmt(errors.nrmse)} | "
        f"DECOMP.RSSD = {_fmt(errors.decomp_rssd)} | MAPE = {_fmt(errors.mape)}"
    )


def describe_inputs(artifact: Artifact) -> dict[str, Any]:
    """Headline facts about a model's input configuration."""
    spec = artifact.input_collect
    periods = None
    if spec.rollingWindowStartWhich is not None and spec.rollingWindowEndWhich is not None:
        periods = spec.rollingWindowEndWhich - spec.rollingWindowStartWhich + 1
    return {
        "date_var": spec.date_var,
        "dep_var": spec.dep_var,
        "dep_var_type": spec.dep_var_type,
        "paid_media_vars": spec.paid_media_vars or [],
        "paid_media_spends": spec.paid_media_spends or [],
        "context_vars": spec.context_vars or [],
        "organic_vars": spec.organic_vars or [],
        "prophet_vars": spec.prophet_vars or [],
        "window": f"{spec.window_start}:{spec.window_end}",
        "window_periods": periods,
        "interval_type": spec.intervalType,
        "with_calibration": spec.calibration_input is not None,
        "adstock": spec.adstock,
        "unused_vars": spec.unused_vars or [],
        "custom_params": flatten_hyps(spec.custom_params),
        "hyperparameters": flatten_hyps(spec.hyperparameters),
        "refresh_chain": spec.refreshChain or [],
    }


def flatten_hyps(params: Any) -> list[str]:
    """
    One ``name: [values]`` line per parameter, e.g. ``tv_S_alphas: [0.5, 3]``.

    Numbers are shown to six significant digits.
    """
    if not isinstance(params, dict):
        return []

    def _fmt(v: Any) -> str:
        if isinstance(v, float):
            return f"{v:.6g}"
        return str(v)

    lines = []
    for name, values in params.items():
        values = values if isinstance(values, list) else [values]
        lines.append(f"{name}: [{', '.join(_fmt(v) for v in values)}]")
    return lines

"""Shared fixtures: live-looking InputCollect / OutputCollect objects."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from model_snapshot.config import SnapshotConfig, set_config
from model_snapshot.core.artifacts import write_model


CHANNELS = ["tv_S", "ooh_S", "facebook_S"]
HYPER_SUFFIXES = ["thetas", "alphas", "gammas"]


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration."""
    set_config(SnapshotConfig())
    yield
    set_config(SnapshotConfig())


def make_input_collect(dep_var_type="revenue", refresh_chain=None, refresh_source=None):
    dates = pd.date_range("2016-01-04", periods=10, freq="W-MON")
    return {
        "dt_input": pd.DataFrame({"DATE": dates, "revenue": np.arange(10) * 100.0}),
        "dt_holidays": pd.DataFrame({"ds": dates[:2], "holiday": ["a", "b"]}),
        "date_var": "DATE",
        "dep_var": "revenue",
        "dep_var_type": dep_var_type,
        "paid_media_vars": ["tv_S", "ooh_S", "facebook_I"],
        "paid_media_spends": list(CHANNELS),
        "context_vars": ["competitor_sales_B"],
        "organic_vars": ["newsletter"],
        "factor_vars": [],
        "prophet_vars": ["trend", "season", "holiday"],
        "prophet_country": "DE",
        "adstock": "geometric",
        "intervalType": "week",
        "window_start": pd.Timestamp("2016-01-04"),
        "window_end": pd.Timestamp("2018-12-31"),
        "rollingWindowStartWhich": 7,
        "rollingWindowEndWhich": 163,
        "rollingWindowLength": 157,
        "refreshAddedStart": None,
        "calibration_input": pd.DataFrame({
            "channel": ["facebook_S"],
            "liftStartDate": [pd.Timestamp("2018-05-01")],
            "liftEndDate": [pd.Timestamp("2018-06-10")],
            "liftAbs": [400000],
        }),
        "hyperparameters": {
            f"{ch}_{hp}": [0.1, 0.9] for ch in CHANNELS for hp in HYPER_SUFFIXES
        },
        "custom_params": {"ts_validation": False},
        "refreshChain": list(refresh_chain or []),
        "refreshSourceID": refresh_source,
    }


def make_output_collect(sol_ids, plot_folder=None):
    variables = [*CHANNELS, "competitor_sales_B", "(Intercept)"]
    decomp_rows = []
    for i, sol in enumerate(sol_ids):
        for j, var in enumerate(variables):
            is_media = var in CHANNELS
            decomp_rows.append({
                "solID": sol,
                "rn": var,
                "coef": 0.1 * (j + 1) + i,
                "xDecompPerc": 0.05 * (j + 1),
                "xDecompAggRF": 1000.0 * (j + 1),
                "roi_total": 1.5 + j if is_media else np.nan,
                "cpa_total": 20.0 + j if is_media else np.nan,
                "mean_response": 50.0 * (j + 1) if is_media else np.nan,
                "mean_spend": 200.0 * (j + 1) if is_media else np.nan,
            })

    hyp_rows = []
    for i, sol in enumerate(sol_ids):
        row = {"solID": sol}
        # channels deliberately out of alphabetical order
        for ch in CHANNELS:
            for hp in HYPER_SUFFIXES:
                row[f"{ch}_{hp}"] = round(0.1 + 0.01 * i + 0.001 * len(row), 4)
        row.update({
            "lambda": 0.002 * (i + 1),
            "rsq_train": 0.9 - 0.01 * i,
            "nrmse": 0.08 + 0.01 * i,
            "decomp.rssd": 0.1,
            "mape": 0,
            "iterNG": 100,
            "ElapsedAccum": 12.5,
        })
        hyp_rows.append(row)

    return {
        "resultHypParam": pd.DataFrame(hyp_rows),
        "xDecompAgg": pd.DataFrame(decomp_rows),
        "allSolutions": list(sol_ids),
        "hyper_updated": {f"{ch}_thetas": [0.1, 0.9] for ch in CHANNELS},
        "clusters": {"n_clusters": 3},
        "plot_folder": plot_folder,
        "cores": 8,
        "iterations": 2000,
        "trials": 5,
        "seed": np.int64(123),
        "hyper_fixed": False,
        "mediaVecCollect": None,
    }


@pytest.fixture
def input_collect():
    return make_input_collect()


@pytest.fixture
def output_collect(tmp_path):
    return make_output_collect(["1_10_1", "1_12_3", "2_5_7"], plot_folder=f"{tmp_path}/Robyn_202301_init/")


@pytest.fixture
def refresh_chain(tmp_path):
    """
    Three nested refresh sessions A -> B -> C, written to disk.

    Returns the file path of each model keyed by id.
    """
    base = tmp_path / "models"
    sessions = ["Robyn_0001_init", "Robyn_0002_rf1", "Robyn_0003_rf2"]
    ids = ["A", "B", "C"]

    files = {}
    for depth, model_id in enumerate(ids):
        folder = base.joinpath(*sessions[: depth + 1])
        inputs = make_input_collect(
            refresh_chain=ids[:depth],
            refresh_source=ids[depth - 1] if depth else None,
        )
        outputs = make_output_collect([model_id], plot_folder=f"{folder}/")
        artifact = write_model(inputs, outputs, quiet=True)
        files[model_id] = Path(artifact.json_file)
    return files

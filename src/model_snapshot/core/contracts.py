"""
Canonical data contracts for model-snapshot.

These Pydantic models define the shape of a model file: the filtered
input configuration (``InputCollect``), the selected model's outputs
(``ExportedModel``), and the values built on top of them when files are
written, read, or chained together.

The contracts are strict on the fields the chain and the recreation
step rely on, and permissive on additional fields so files produced by
other tooling versions still load.

Files written by the R tooling box every scalar into a one-element
array (``"dep_var": ["revenue"]``).  Scalar fields unbox such values on
the way in so both flavours validate to the same record.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from model_snapshot.core.exceptions import ChainLengthMismatchError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ArtifactSource(str, Enum):
    WRITTEN = "written"
    READ = "read"


class ChainStatus(str, Enum):
    COMPLETE = "complete"
    LENGTH_MISMATCH = "length_mismatch"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unbox(value: Any) -> Any:
    if isinstance(value, list) and len(value) == 1 and not isinstance(value[0], (list, dict)):
        return value[0]
    if isinstance(value, list) and not value:
        return None
    return value


def _box(value: Any) -> Any:
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, (tuple, set)):
        return list(value)
    return [value]


def _as_date_string(value: Any) -> Any:
    value = _unbox(value)
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return value


# ---------------------------------------------------------------------------
# InputCollect
# ---------------------------------------------------------------------------

class InputSpec(BaseModel):
    """A model's input configuration, as stored under ``InputCollect``."""

    date_var: str | None = None
    dep_var: str | None = None
    dep_var_type: str | None = Field(default=None, description="revenue or conversion")

    paid_media_vars: list[str] | None = None
    paid_media_spends: list[str] | None = None
    context_vars: list[str] | None = None
    organic_vars: list[str] | None = None
    factor_vars: list[str] | None = None
    unused_vars: list[str] | None = None

    prophet_vars: list[str] | None = None
    prophet_country: str | None = None

    adstock: str | None = Field(default=None, description="geometric, weibull_cdf or weibull_pdf")
    intervalType: str | None = None
    window_start: str | None = None
    window_end: str | None = None
    rollingWindowStartWhich: int | None = None
    rollingWindowEndWhich: int | None = None
    rollingWindowLength: int | None = None

    # Structured fields kept verbatim by the snapshot filter
    calibration_input: Any = None
    hyperparameters: Any = None
    custom_params: Any = None

    # Lineage
    refreshChain: list[str] | None = None
    refreshSourceID: str | None = None

    class Config:
        extra = "allow"

    @field_validator(
        "date_var", "dep_var", "dep_var_type", "prophet_country", "adstock",
        "intervalType", "rollingWindowStartWhich", "rollingWindowEndWhich",
        "rollingWindowLength", "refreshSourceID",
        mode="before",
    )
    @classmethod
    def _unbox_scalars(cls, v: Any) -> Any:
        return _unbox(v)

    @field_validator("window_start", "window_end", mode="before")
    @classmethod
    def _window_dates(cls, v: Any) -> Any:
        return _as_date_string(v)

    @field_validator(
        "paid_media_vars", "paid_media_spends", "context_vars", "organic_vars",
        "factor_vars", "unused_vars", "prophet_vars", "refreshChain",
        mode="before",
    )
    @classmethod
    def _box_lists(cls, v: Any) -> Any:
        return _box(v)

    @property
    def is_revenue(self) -> bool:
        return self.dep_var_type == "revenue"


# ---------------------------------------------------------------------------
# ExportedModel
# ---------------------------------------------------------------------------

class SummaryRow(BaseModel):
    """Decomposition summary for one regressor of the selected model."""

    variable: str
    coef: float | None = None
    decompPer: float | None = None
    decompAgg: float | None = None
    performance: float | None = Field(default=None, description="ROI for revenue, CPA otherwise")
    mean_response: float | None = None
    mean_spend: float | None = None

    class Config:
        extra = "allow"


class ErrorMetrics(BaseModel):
    """Fit errors of the selected model."""

    rsq_train: float | None = None
    nrmse: float | None = None
    decomp_rssd: float | None = Field(default=None, alias="decomp.rssd")
    mape: float | None = None

    class Config:
        extra = "allow"
        populate_by_name = True

    @field_validator("rsq_train", "nrmse", "decomp_rssd", "mape", mode="before")
    @classmethod
    def _unbox_values(cls, v: Any) -> Any:
        return _unbox(v)


class ExportedModel(BaseModel):
    """Outputs of the selected model, as stored under ``ExportedModel``."""

    select_model: str
    summary: list[SummaryRow] = Field(default_factory=list)
    errors: ErrorMetrics | None = None
    hyper_values: dict[str, float | None] = Field(default_factory=dict)
    hyper_updated: Any = None
    plot_folder: str | None = None

    class Config:
        extra = "allow"

    @field_validator("select_model", "plot_folder", mode="before")
    @classmethod
    def _unbox_scalars(cls, v: Any) -> Any:
        return _unbox(v)

    @field_validator("errors", mode="before")
    @classmethod
    def _single_error_row(cls, v: Any) -> Any:
        # Data frames come through as a list of row records
        if isinstance(v, list):
            return v[0] if v else None
        return v

    @field_validator("hyper_values", mode="before")
    @classmethod
    def _unbox_hyper_values(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {k: _unbox(val) for k, val in v.items()}
        return v


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

class Artifact(BaseModel):
    """
    A model file, written or read.

    ``json_file`` is where the artifact lives (or would live, when it was
    built without exporting).  ``source`` records whether it came from
    ``write_model`` or ``read_model``.
    """

    input_collect: InputSpec = Field(alias="InputCollect")
    exported_model: ExportedModel | None = Field(default=None, alias="ExportedModel")
    json_file: str
    source: ArtifactSource

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def selector(self) -> str:
        """Label used in the file name: the model id, or ``inputs``."""
        if self.exported_model is None:
            return "inputs"
        return self.exported_model.select_model

    @property
    def model_id(self) -> str | None:
        return self.exported_model.select_model if self.exported_model else None

    def to_json_dict(self) -> dict[str, Any]:
        """Return the document written to disk."""
        data = {"InputCollect": self.input_collect.model_dump(exclude_none=True)}
        if self.exported_model is not None:
            data["ExportedModel"] = self.exported_model.model_dump(by_alias=True, exclude_none=True)
        return data


# ---------------------------------------------------------------------------
# Refresh chains
# ---------------------------------------------------------------------------

class ChainLink(BaseModel):
    """One model of a refresh chain."""

    model_id: str
    json_file: str
    artifact: Artifact

    class Config:
        protected_namespaces = ()

    @property
    def source_id(self) -> str | None:
        """Id of the model this one was refreshed from."""
        return self.artifact.input_collect.refreshSourceID

    @property
    def plot_folder(self) -> str | None:
        return self.artifact.exported_model.plot_folder if self.artifact.exported_model else None


class Chain(BaseModel):
    """
    A refresh chain, earliest model first.

    ``chain`` is the lineage declared by the latest model (its
    ``refreshChain`` plus its own id).  When the loaded links disagree
    with it in length, ``status`` is ``LENGTH_MISMATCH`` and ``warnings``
    says why; the links are still usable for inspection.
    """

    links: list[ChainLink] = Field(default_factory=list)
    json_files: list[str] = Field(default_factory=list)
    chain: list[str] = Field(default_factory=list)
    status: ChainStatus = ChainStatus.COMPLETE
    warnings: list[str] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def ids(self) -> list[str]:
        return [link.model_id for link in self.links]

    @property
    def is_complete(self) -> bool:
        return self.status == ChainStatus.COMPLETE

    def get(self, model_id: str) -> ChainLink | None:
        for link in self.links:
            if link.model_id == model_id:
                return link
        return None

    def raise_for_status(self) -> "Chain":
        """Escalate a length mismatch to ``ChainLengthMismatchError``."""
        if self.status == ChainStatus.LENGTH_MISMATCH:
            raise ChainLengthMismatchError(expected=self.chain, found=self.ids)
        return self

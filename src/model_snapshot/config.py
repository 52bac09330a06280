"""
Configuration management for model-snapshot.

Centralised configuration with YAML loading and sensible defaults.
The config drives the file format (name prefix, indentation, which
fields survive the snapshot filter) and the refresh-chain directory
convention.
"""

from __future__ import annotations

import sys
from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section configs
# ---------------------------------------------------------------------------

class FormatConfig(BaseModel):
    """Model file naming and content rules."""

    file_prefix: str = Field(default="RobynModel", description="Files are named <prefix>-<selector>.json")
    json_indent: int = Field(default=2)
    keep_input_fields: list[str] = Field(
        default_factory=lambda: ["calibration_input", "hyperparameters", "custom_params"],
        description="InputCollect fields exported verbatim even when structured",
    )
    hyper_suffixes: list[str] = Field(
        default_factory=lambda: ["thetas", "shapes", "scales", "alphas", "gammas"],
    )
    regularization_param: str = Field(default="lambda")


class ChainConfig(BaseModel):
    """Refresh-chain directory convention."""

    session_prefix: str = Field(default="Robyn_", description="Prefix of each refresh session folder")


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

class SnapshotConfig(BaseModel):
    """Root configuration for model-snapshot."""

    log_level: str = Field(default="INFO")

    format: FormatConfig = Field(default_factory=FormatConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "SnapshotConfig":
        """Load config from a YAML file."""
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Write config to a YAML file."""
        with open(Path(path), "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)


# ---------------------------------------------------------------------------
# Global singleton
# ---------------------------------------------------------------------------

_config: SnapshotConfig | None = None


def get_config() -> SnapshotConfig:
    """Return the global config instance (creates default if needed)."""
    global _config
    if _config is None:
        _config = SnapshotConfig()
    return _config


def set_config(config: SnapshotConfig) -> None:
    """Override the global config instance."""
    global _config
    _config = config


def load_config(path: Path | str | None = None) -> SnapshotConfig:
    """
    Load config from file, falling back to standard locations, then defaults.
    """
    global _config

    if path is not None:
        _config = SnapshotConfig.from_yaml(path)
    else:
        for candidate in [Path("config.yaml"), Path("config/config.yaml")]:
            if candidate.exists():
                _config = SnapshotConfig.from_yaml(candidate)
                break
        else:
            _config = SnapshotConfig()

    return _config


def configure_logging(level: str | None = None) -> None:
    """Send loguru output to stderr at *level* (defaults to the config's)."""
    logger.remove()
    logger.add(sys.stderr, level=(level or get_config().log_level).upper())

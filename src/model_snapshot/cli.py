"""
Command-line interface for model-snapshot.

Provides commands for:
  - Validating and summarising a model file
  - Walking a refresh chain
  - Showing a model's channel hyperparameters
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from model_snapshot.config import configure_logging, get_config, load_config

app = typer.Typer(
    name="model-snapshot",
    help="Export, import and chain fitted marketing-mix models",
    add_completion=False,
)


@app.callback()
def main(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.yaml",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
):
    """Load configuration and set up logging."""
    load_config(config_path)
    configure_logging(log_level)


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------

@app.command()
def read(
    json_file: Path = typer.Argument(..., help="Model file to import"),
    step: int = typer.Option(1, "--step", "-s", min=1, max=2, help="1 = inputs only, 2 = inputs and model"),
):
    """Validate a model file and summarise its contents."""
    from model_snapshot.core.artifacts import read_model
    from model_snapshot.core.tables import describe_inputs, errors_line, summary_frame

    artifact = read_model(json_file, step=step)
    info = describe_inputs(artifact)

    logger.info(f"Date: {info['date_var']}")
    logger.info(f"Dependent: {info['dep_var']} [{info['dep_var_type']}]")
    logger.info(f"Paid Media: {', '.join(info['paid_media_vars'])}")
    logger.info(f"Paid Media Spend: {', '.join(info['paid_media_spends'])}")
    logger.info(f"Context: {', '.join(info['context_vars'])}")
    logger.info(f"Organic: {', '.join(info['organic_vars'])}")
    logger.info(f"Prophet: {', '.join(info['prophet_vars']) or 'Deactivated'}")
    logger.info(f"Unused variables: {', '.join(info['unused_vars']) or 'None'}")
    logger.info(f"Model Window: {info['window']} ({info['window_periods']} {info['interval_type']}s)")
    logger.info(f"With Calibration: {info['with_calibration']}")
    logger.info(f"Adstock: {info['adstock']}")
    custom = "".join(f"\n  {line}" for line in info["custom_params"]) or "None"
    logger.info(f"Custom parameters: {custom}")
    hyps = "".join(f"\n  {line}" for line in info["hyperparameters"])
    logger.info(f"Hyper-parameters for channel transformations:{hyps}")

    if artifact.exported_model is not None:
        logger.info(f"Exported model: {artifact.exported_model.select_model}")
        logger.info(errors_line(artifact))
        summary = summary_frame(artifact)
        if not summary.empty:
            logger.info(f"Summary values on selected model:\n{summary.to_string(index=False)}")


# ---------------------------------------------------------------------------
# chain
# ---------------------------------------------------------------------------

@app.command()
def chain(
    json_file: Path = typer.Argument(..., help="Latest model file of a refresh chain"),
    strict: bool = typer.Option(False, "--strict", help="Fail when the chain is incomplete"),
):
    """Load every model of a refresh chain, earliest first."""
    from model_snapshot.core.chain import walk_chain

    result = walk_chain(json_file)
    for i, (link, path) in enumerate(zip(result.links, result.json_files)):
        logger.info(f"  [{i}] {link.model_id}  {path}")
    logger.info(f"Declared chain: {' -> '.join(result.chain)}  status={result.status.value}")

    if strict and not result.is_complete:
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# hypers
# ---------------------------------------------------------------------------

@app.command()
def hypers(
    json_file: Path = typer.Argument(..., help="Model file with an exported model"),
):
    """Show the exported model's hyperparameters per channel."""
    from model_snapshot.core.artifacts import read_model
    from model_snapshot.core.tables import hyper_table

    artifact = read_model(json_file, step=2, quiet=True)
    table = hyper_table(artifact.exported_model.hyper_values)
    logger.info(f"Adstock: {artifact.input_collect.adstock}")
    logger.info(f"\n{table.to_string(index=False)}")

    reg_name = get_config().format.regularization_param
    reg = artifact.exported_model.hyper_values.get(reg_name)
    if reg is not None:
        logger.info(f"{reg_name} = {reg:.4g}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()

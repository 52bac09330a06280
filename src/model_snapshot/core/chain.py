"""
Refresh-chain reconstruction.

Each refresh of a model is exported into a session folder nested inside
the folder of the model it was refreshed from::

    <base>/Robyn_<init>/RobynModel-A.json
    <base>/Robyn_<init>/Robyn_<rf1>/RobynModel-B.json
    <base>/Robyn_<init>/Robyn_<rf1>/Robyn_<rf2>/RobynModel-C.json

Starting from the latest file, ``walk_chain`` reads each model's
``refreshSourceID`` to find its predecessor one folder up, until the
outermost session folder is reached.  The number of session folders in
the latest model's ``plot_folder`` bounds the walk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from loguru import logger

from model_snapshot.config import get_config
from model_snapshot.core.artifacts import model_file_path, read_model
from model_snapshot.core.contracts import Chain, ChainLink, ChainStatus
from model_snapshot.core.exceptions import (
    ChainAnchorError,
    ChainIntegrityError,
    MissingSectionError,
)


class SessionPathResolver(Protocol):
    """Maps a model's ``plot_folder`` to its session folder names, outermost first."""

    def __call__(self, plot_folder: str) -> list[str]:
        ...


class PrefixSessionResolver:
    """
    Session folders are the path components starting with *prefix*.

    When no component matches, the last non-empty component is used, so
    a single model exported outside the convention still forms a chain
    of one.
    """

    def __init__(self, prefix: str | None = None):
        self.prefix = prefix if prefix is not None else get_config().chain.session_prefix

    def __call__(self, plot_folder: str) -> list[str]:
        parts = str(plot_folder).split("/")
        sessions = [p for p in parts if p.startswith(self.prefix)] if self.prefix else []
        if not sessions:
            sessions = [p for p in parts if p][-1:]
            logger.debug(f"No '{self.prefix}' session folders in {plot_folder}; using {sessions}")
        return sessions


def chain_base_dir(plot_folder: str, anchor: str) -> str:
    """
    Directory holding the outermost session folder *anchor*.

    *anchor* must match a whole path component; ``/models/mod/`` anchored
    at ``mod`` has base ``/models``.

    Raises:
        ChainAnchorError: The base would be empty or the filesystem root.
    """
    parts = str(plot_folder).split("/")
    base = "/".join(parts[: parts.index(anchor)]) if anchor in parts else ""
    if not base.strip("/"):
        raise ChainAnchorError(plot_folder)
    return base


def walk_chain(json_file: Path | str, resolver: SessionPathResolver | None = None) -> Chain:
    """
    Load every model of a refresh chain, earliest first.

    Args:
        json_file: The latest model file of the chain.
        resolver:  Session-folder resolver; defaults to the configured
                   ``Robyn_`` prefix convention.

    Returns:
        A ``Chain``.  Its ``status`` is ``LENGTH_MISMATCH`` when the
        number of loaded models differs from the lineage the latest
        model declares.

    Raises:
        Any ``read_model`` error for a missing or invalid link, and
        ``MissingSectionError`` when a link lacks the fields needed to
        find its predecessor.
    """
    json_file = str(json_file)
    latest = read_model(json_file, step=2, quiet=True)
    declared = [*(latest.input_collect.refreshChain or []), latest.exported_model.select_model]

    plot_folder = latest.exported_model.plot_folder
    if not plot_folder:
        raise MissingSectionError("ExportedModel.plot_folder", json_file)

    sessions = (resolver or PrefixSessionResolver())(plot_folder)
    if not sessions:
        raise ChainAnchorError(plot_folder)
    base = chain_base_dir(plot_folder, sessions[0])
    logger.debug(f"Refresh chain base {base}, sessions {sessions}")

    # Walk latest -> earliest; each link points back at its predecessor
    descending = [ChainLink(model_id=latest.exported_model.select_model, json_file=json_file, artifact=latest)]
    for depth in range(len(sessions) - 1, 0, -1):
        child = descending[-1]
        if not child.source_id:
            raise MissingSectionError("InputCollect.refreshSourceID", child.json_file)
        path = model_file_path("/".join([base, *sessions[:depth]]), child.source_id)
        logger.debug(f"Loading refresh source {child.source_id} from {path}")
        artifact = read_model(path, step=2, quiet=True)
        descending.append(ChainLink(model_id=artifact.exported_model.select_model, json_file=path, artifact=artifact))

    links = descending[::-1]
    _check_lineage(links)

    json_files = [
        model_file_path(link.plot_folder or str(Path(link.json_file).parent), link.model_id)
        for link in links
    ]

    status = ChainStatus.COMPLETE
    warnings: list[str] = []
    if len(links) != len(declared):
        status = ChainStatus.LENGTH_MISMATCH
        msg = (
            f"Can't replicate chain-like results if you don't follow the chain structure: "
            f"{json_file} declares {len(declared)} models but {len(links)} were found"
        )
        warnings.append(msg)
        logger.warning(msg)

    return Chain(links=links, json_files=json_files, chain=declared, status=status, warnings=warnings)


def _check_lineage(links: list[ChainLink]) -> None:
    """Every link must be the refresh source of the link after it."""
    for ancestor, descendant in zip(links, links[1:]):
        if descendant.source_id != ancestor.model_id:
            raise ChainIntegrityError(
                f"{ancestor.json_file} holds model {ancestor.model_id}, "
                f"but {descendant.model_id} was refreshed from {descendant.source_id}",
                path=ancestor.json_file,
            )

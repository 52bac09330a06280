"""
Custom exception types for model-snapshot.

Every exception carries a machine-readable code so callers can
handle specific failure modes programmatically.
"""

from __future__ import annotations


class SnapshotError(Exception):
    """Base exception for all model-snapshot errors."""

    def __init__(self, message: str, code: str = "SNAPSHOT_ERROR"):
        self.code = code
        super().__init__(message)


class UnknownModelIdError(SnapshotError):
    """Raised when the selected model id is not among the fitted solutions."""

    def __init__(self, model_id: str | None, available: list[str] | None = None):
        self.model_id = model_id
        self.available = list(available or [])
        shown = ", ".join(self.available[:10]) or "(none)"
        if len(self.available) > 10:
            shown += ", ..."
        super().__init__(
            f"Model id '{model_id}' is not a known solution. Available: {shown}",
            code="UNKNOWN_MODEL_ID",
        )


class InvalidExtensionError(SnapshotError):
    """Raised when a model file does not have a .json extension."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"JSON file must be a valid .json file: {path}", code="INVALID_EXTENSION")


class ArtifactNotFoundError(SnapshotError, FileNotFoundError):
    """Raised when a model file does not exist."""

    def __init__(self, path: str):
        self.path = path
        SnapshotError.__init__(self, f"JSON file can't be imported: {path}", code="FILE_NOT_FOUND")


class MissingSectionError(SnapshotError):
    """Raised when a model file lacks the section required for the requested step."""

    def __init__(self, section: str, path: str = "", message: str | None = None):
        self.section = section
        self.path = path
        if message is None:
            message = f"JSON file must contain {section} element"
            if path:
                message += f": {path}"
        super().__init__(message, code="MISSING_SECTION")


class ChainAnchorError(MissingSectionError):
    """Raised when a refresh chain's base directory cannot be located."""

    def __init__(self, plot_folder: str):
        self.plot_folder = plot_folder
        super().__init__(
            "plot_folder",
            message=f"Can't locate the base directory of the refresh chain from '{plot_folder}'",
        )


class ArtifactSchemaError(SnapshotError):
    """Raised when a model file section does not match the expected shape."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message, code="ARTIFACT_SCHEMA")


class ChainIntegrityError(SnapshotError):
    """Raised when loaded chain links do not point at each other."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message, code="CHAIN_INTEGRITY")


class ChainLengthMismatchError(SnapshotError):
    """Raised on request when a chain is shorter or longer than its declared lineage."""

    def __init__(self, expected: list[str], found: list[str]):
        self.expected = list(expected)
        self.found = list(found)
        super().__init__(
            f"Refresh chain declares {len(self.expected)} models ({', '.join(self.expected)}) "
            f"but {len(self.found)} were loaded ({', '.join(self.found)})",
            code="CHAIN_LENGTH_MISMATCH",
        )

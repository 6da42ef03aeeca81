"""Error kinds reported while walking a directory tree."""

from __future__ import annotations

from pathlib import Path


class WalkError(Exception):
    """Base class for per-entry traversal failures.

    A walk error never aborts a traversal. The walker records it and
    continues with the next sibling.

    Attributes:
        path: Filesystem path the failure relates to.
        cause: Underlying OS error, when there is one.
    """

    reason = "cannot access"

    def __init__(self, path: Path, cause: OSError | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(self._message())

    def _message(self) -> str:
        message = f"{self.reason} '{self.path}'"
        if self.cause is not None and self.cause.strerror:
            message += f": {self.cause.strerror}"
        return message


class MetadataUnavailableError(WalkError):
    """Metadata for a path could not be read; the entry is dropped."""

    reason = "cannot stat"


class DirectoryReadError(WalkError):
    """A directory could not be listed; it is yielded without children."""

    reason = "cannot open directory"


class LinkResolutionError(WalkError):
    """A symlink target could not be read or identified."""

    reason = "cannot resolve link"


class UnsupportedMetadataError(NotImplementedError):
    """Raised by entry accessors for fields the platform does not provide."""

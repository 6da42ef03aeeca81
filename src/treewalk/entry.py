"""Entry descriptor: one filesystem node as seen by the walker."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from treewalk.errors import (
    LinkResolutionError,
    MetadataUnavailableError,
    UnsupportedMetadataError,
)

HIDDEN_PREFIX = "."


class EntryKind(Enum):
    """File type derived once from ``lstat`` metadata."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> EntryKind:
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.FILE
        return cls.OTHER


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem entry produced by the walker.

    Attributes:
        path: Path as given by the root argument or the directory read.
        depth: ``0`` for the root, plus one per descent level.
        kind: File type of the entry itself (symlinks are not followed).
        metadata: ``lstat`` result for the entry.
        linked_path: Raw, unresolved link target. Present only for symlinks.
        target_metadata: ``stat`` result of the link target, or ``None``
            when the entry is not a symlink or the target is missing.
        is_recursive_link: Whether following this symlink would re-enter a
            directory already entered during the traversal.
    """

    path: Path
    depth: int
    kind: EntryKind
    metadata: os.stat_result
    linked_path: Path | None = None
    target_metadata: os.stat_result | None = None
    is_recursive_link: bool = False

    def __post_init__(self) -> None:
        if (self.linked_path is not None) != (self.kind is EntryKind.SYMLINK):
            raise ValueError(
                f"linked_path must be set exactly when the entry is a symlink: {self.path}"
            )

    @classmethod
    def from_path(cls, path: Path, depth: int = 0) -> Entry:
        """Build an entry for an explicit path, typically the traversal root.

        Raises:
            MetadataUnavailableError: If ``lstat`` fails.
            LinkResolutionError: If the path is a symlink that cannot be read.
        """
        try:
            metadata = os.lstat(path)
        except OSError as exc:
            raise MetadataUnavailableError(path, exc) from exc
        return cls._build(path, depth, metadata)

    @classmethod
    def from_dir_entry(cls, dir_entry: os.DirEntry[str], depth: int) -> Entry:
        """Build an entry from an ``os.scandir`` result.

        Raises:
            MetadataUnavailableError: If ``lstat`` fails.
            LinkResolutionError: If the entry is a symlink that cannot be read.
        """
        path = Path(dir_entry.path)
        try:
            metadata = dir_entry.stat(follow_symlinks=False)
        except OSError as exc:
            raise MetadataUnavailableError(path, exc) from exc
        return cls._build(path, depth, metadata)

    @classmethod
    def _build(cls, path: Path, depth: int, metadata: os.stat_result) -> Entry:
        kind = EntryKind.from_mode(metadata.st_mode)
        if kind is not EntryKind.SYMLINK:
            return cls(path=path, depth=depth, kind=kind, metadata=metadata)

        try:
            linked_path = Path(os.readlink(path))
        except OSError as exc:
            raise LinkResolutionError(path, exc) from exc

        try:
            target_metadata: os.stat_result | None = os.stat(path)
        except OSError:
            # Dangling link, or a link loop the OS refuses to resolve.
            target_metadata = None

        return cls(
            path=path,
            depth=depth,
            kind=kind,
            metadata=metadata,
            linked_path=linked_path,
            target_metadata=target_metadata,
        )

    # -- names --------------------------------------------------------

    @property
    def name(self) -> str:
        """Raw name of the entry; the full path for ``.`` or ``/``."""
        return self.path.name or str(self.path)

    @property
    def clean_name(self) -> str:
        """Name with one leading hidden marker removed, used for sorting."""
        name = self.name
        if name.startswith(HIDDEN_PREFIX) and len(name) > 1:
            return name[len(HIDDEN_PREFIX) :]
        return name

    @property
    def is_hidden(self) -> bool:
        return self.path.name.startswith(HIDDEN_PREFIX)

    # -- type ---------------------------------------------------------

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind is EntryKind.SYMLINK

    @property
    def target_is_dir(self) -> bool:
        """Whether this is a symlink whose resolved target is a directory."""
        return self.target_metadata is not None and stat.S_ISDIR(
            self.target_metadata.st_mode
        )

    @property
    def is_executable(self) -> bool:
        return self.kind is EntryKind.FILE and bool(self.mode & 0o111)

    # -- identity -----------------------------------------------------

    @property
    def identity(self) -> tuple[int, int] | None:
        """Stable ``(device, inode)`` of the node a traversal would enter.

        For symlinks this is the identity of the resolved target, or
        ``None`` when the target cannot be resolved.
        """
        if self.is_symlink:
            if self.target_metadata is None:
                return None
            return (self.target_metadata.st_dev, self.target_metadata.st_ino)
        return (self.metadata.st_dev, self.metadata.st_ino)

    # -- metadata -----------------------------------------------------

    @property
    def size(self) -> int:
        return self.metadata.st_size

    @property
    def mtime(self) -> float:
        return self.metadata.st_mtime

    @property
    def mode(self) -> int:
        return self.metadata.st_mode

    @property
    def inode(self) -> int:
        return self.metadata.st_ino

    @property
    def device(self) -> int:
        return self.metadata.st_dev

    @property
    def uid(self) -> int:
        """Owning user id.

        Raises:
            UnsupportedMetadataError: On platforms without POSIX ownership.
        """
        if os.name != "posix":
            raise UnsupportedMetadataError("user ids are not supported on this platform")
        return self.metadata.st_uid

    @property
    def gid(self) -> int:
        """Owning group id.

        Raises:
            UnsupportedMetadataError: On platforms without POSIX ownership.
        """
        if os.name != "posix":
            raise UnsupportedMetadataError("group ids are not supported on this platform")
        return self.metadata.st_gid

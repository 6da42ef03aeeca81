"""Lazy depth-first tree walker over an explicit stack of directory frames.

Each frame holds the fully read, filtered and sorted children of one
opened directory. No directory handle stays open across ``next`` calls:
a directory is listed in one ``os.scandir`` pass when its entry is
handled, and its frame is pushed before the entry is yielded.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from treewalk.entry import Entry
from treewalk.errors import (
    DirectoryReadError,
    LinkResolutionError,
    MetadataUnavailableError,
    WalkError,
)
from treewalk.filter import EntryFilter, PatternFilter
from treewalk.pattern import Pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TreeConfig:
    """Traversal policy handed to the walker.

    Attributes:
        root: Root path to traverse.
        pattern: Optional compiled pattern; its ``inclusive`` flag decides
            whether matching files are kept or dropped.
        visit_all: Whether to include hidden entries.
        dirs_only: Whether to include only directories.
        max_depth: Deepest entry depth to emit. Directories at this depth
            are emitted but not expanded. ``None`` means unlimited.
        dirs_first: Whether to sort directories before files.
        rev_alpha_sort: Whether to sort names in descending order.
        last_mod_sort: Whether to sort by modification time, oldest first.
        follow_symlinks: Whether to descend into symlinked directories.
        file_limit: Do not expand directories with more children than
            this. ``None`` means unlimited.
    """

    root: Path
    pattern: Pattern | None = None
    visit_all: bool = False
    dirs_only: bool = False
    max_depth: int | None = None
    dirs_first: bool = False
    rev_alpha_sort: bool = False
    last_mod_sort: bool = False
    follow_symlinks: bool = False
    file_limit: int | None = None

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.file_limit is not None and self.file_limit < 1:
            raise ValueError(f"file_limit must be >= 1, got {self.file_limit}")


class _Frame:
    """Sorted children of one opened directory and a read cursor."""

    __slots__ = ("entries", "position")

    def __init__(self, entries: list[Entry]) -> None:
        self.entries = entries
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.entries) - self.position

    def advance(self) -> Entry:
        entry = self.entries[self.position]
        self.position += 1
        return entry


class Walker:
    """Single-pass iterator of ``(remaining, entry)`` in depth-first order.

    ``remaining`` is the number of siblings left in the entry's frame
    before the entry was taken, so ``1`` marks the last sibling. The root
    is always reported with ``remaining == 1``.

    Per-entry failures never stop the walk; they are appended to
    :attr:`errors` in the order they occur.
    """

    def __init__(
        self,
        config: TreeConfig,
        entry_filter: EntryFilter | None = None,
    ) -> None:
        """Initialize a walker.

        Args:
            config: Traversal policy.
            entry_filter: Optional extra filter applied after the built-in
                hidden, directories-only and pattern filters.
        """
        self._config = config
        self._filters: list[EntryFilter] = []
        if config.pattern is not None:
            self._filters.append(PatternFilter(config.pattern))
        if entry_filter is not None:
            self._filters.append(entry_filter)

        self._pending_root: Path | None = config.root
        self._stack: list[_Frame] = []
        self._visited: set[tuple[int, int]] = set()
        self.errors: list[WalkError] = []

    def __iter__(self) -> Walker:
        return self

    def __next__(self) -> tuple[int, Entry]:
        if self._pending_root is not None:
            root, self._pending_root = self._pending_root, None
            entry = self._read_root(root)
            if entry is not None:
                return 1, self._handle_entry(entry)

        while self._stack:
            frame = self._stack[-1]
            if not frame.remaining:
                self._stack.pop()
                continue
            remaining = frame.remaining
            return remaining, self._handle_entry(frame.advance())

        raise StopIteration

    # -- entry handling -------------------------------------------------

    def _read_root(self, root: Path) -> Entry | None:
        try:
            return Entry.from_path(root, 0)
        except (MetadataUnavailableError, LinkResolutionError) as exc:
            self._report(exc)
            return None

    def _handle_entry(self, entry: Entry) -> Entry:
        """Check for link cycles and push a frame for expandable directories.

        Args:
            entry: Entry about to be yielded.

        Returns:
            Entry: The entry, marked as a recursive link when applicable.
        """
        config = self._config
        identity = entry.identity

        if entry.is_symlink and config.follow_symlinks:
            if identity is None:
                self._report(LinkResolutionError(entry.path))
                return entry
            if identity in self._visited:
                logger.debug("Recursive link: %s -> %s", entry.path, entry.linked_path)
                return replace(entry, is_recursive_link=True)

        if not self._expands(entry):
            return entry

        if config.max_depth is not None and entry.depth >= config.max_depth:
            logger.debug("Not expanding %s at max depth %d", entry.path, config.max_depth)
            return entry

        children = self._read_children(entry)
        if children is None:
            return entry

        if config.file_limit is not None and len(children) > config.file_limit:
            logger.debug(
                "Not expanding %s: %d entries exceed file limit %d",
                entry.path,
                len(children),
                config.file_limit,
            )
            return entry

        if config.follow_symlinks and identity is not None:
            self._visited.add(identity)

        self._stack.append(_Frame(self._sort(children)))
        return entry

    def _expands(self, entry: Entry) -> bool:
        if entry.is_dir:
            return True
        # A symlinked root is always entered, like an explicit directory argument.
        return entry.target_is_dir and (self._config.follow_symlinks or entry.depth == 0)

    def _is_dir_like(self, entry: Entry) -> bool:
        return entry.is_dir or (self._config.follow_symlinks and entry.target_is_dir)

    # -- directory expansion --------------------------------------------

    def _read_children(self, parent: Entry) -> list[Entry] | None:
        """Read, build and filter the children of ``parent``.

        Args:
            parent: Directory entry being expanded.

        Returns:
            list[Entry] | None: Surviving children, or ``None`` when the
            directory cannot be listed.
        """
        try:
            with os.scandir(parent.path) as it:
                dir_entries = list(it)
        except OSError as exc:
            logger.debug("Cannot read directory: %s", parent.path)
            self._report(DirectoryReadError(parent.path, exc))
            return None

        children: list[Entry] = []
        for dir_entry in dir_entries:
            try:
                child = Entry.from_dir_entry(dir_entry, parent.depth + 1)
            except (MetadataUnavailableError, LinkResolutionError) as exc:
                logger.debug("Skipping %s: %s", dir_entry.path, exc)
                self._report(exc)
                continue
            if self._keep(child):
                children.append(child)
        return children

    def _keep(self, entry: Entry) -> bool:
        config = self._config
        if not config.visit_all and entry.is_hidden:
            return False
        is_dir = self._is_dir_like(entry)
        if config.dirs_only and not is_dir:
            return False
        return not any(f.should_exclude(entry, is_dir) for f in self._filters)

    def _sort(self, entries: list[Entry]) -> list[Entry]:
        """Order siblings: directories first, then mtime, then clean name.

        Each stable pass sorts by a more significant key than the last,
        so ties fall back to name order.
        """
        config = self._config
        ordered = sorted(
            entries,
            key=lambda e: (e.clean_name, e.name),
            reverse=config.rev_alpha_sort,
        )
        if config.last_mod_sort:
            ordered.sort(key=lambda e: e.mtime)
        if config.dirs_first:
            ordered.sort(key=lambda e: not self._is_dir_like(e))
        return ordered

    def _report(self, error: WalkError) -> None:
        self.errors.append(error)


def walk(config: TreeConfig, entry_filter: EntryFilter | None = None) -> Walker:
    """Return a fresh walker over ``config``.

    Args:
        config: Traversal policy.
        entry_filter: Optional extra exclude filter.

    Returns:
        Walker: Iterator of ``(remaining, entry)`` pairs.
    """
    return Walker(config, entry_filter)

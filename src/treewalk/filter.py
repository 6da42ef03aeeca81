"""Entry filtering: the filter protocol and wildcard pattern filtering."""

from __future__ import annotations

from typing import Protocol

from treewalk.entry import Entry
from treewalk.pattern import Pattern


class EntryFilter(Protocol):
    """Protocol for entry filtering.

    Keeps walker logic decoupled from matching strategy. ``is_dir`` is
    the walker's view of the entry, which counts followed symlinks to
    directories as directories.
    """

    def should_exclude(self, entry: Entry, is_dir: bool) -> bool: ...


class PatternFilter:
    """Filter non-directory entries by a compiled wildcard pattern.

    Implements ``-P PATTERN`` (inclusive) and ``-I PATTERN`` (exclusive)
    behavior. Directories are never excluded so that matching files
    below them stay reachable.
    """

    def __init__(self, pattern: Pattern) -> None:
        """Initialize pattern filter.

        Args:
            pattern: Compiled pattern carrying its own inclusivity.
        """
        self._pattern = pattern

    def should_exclude(self, entry: Entry, is_dir: bool) -> bool:
        """Return whether an entry should be excluded.

        Args:
            entry: Candidate entry.
            is_dir: Whether the entry is treated as a directory.

        Returns:
            bool: ``True`` when a non-directory does not survive the pattern.
        """
        if is_dir:
            return False
        return not self._pattern.keeps(entry.name)

"""Filter walked entries through the root ``.gitignore`` using pathspec."""

from __future__ import annotations

import logging
from pathlib import Path

from pathspec import GitIgnoreSpec

from treewalk.entry import Entry

logger = logging.getLogger(__name__)


class GitignoreFilter:
    """Exclude entries matched by a gitignore spec rooted at ``root``.

    Entries are matched by their path relative to ``root``. Directories
    get a trailing ``/`` so that ``name/`` rules only hit directories.
    """

    def __init__(self, root: Path, spec: GitIgnoreSpec) -> None:
        self._root = root
        self._spec = spec

    @classmethod
    def from_root(cls, root: Path) -> GitignoreFilter | None:
        """Build a filter from ``root/.gitignore``.

        Args:
            root: Walk root holding the ``.gitignore``.

        Returns:
            GitignoreFilter | None: The filter, or ``None`` when the file is
            missing or unreadable. An unreadable file is not a walk error.
        """
        path = root / ".gitignore"
        try:
            rules = path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            logger.debug("No usable .gitignore at %s: %s", path, exc)
            return None
        return cls(root, GitIgnoreSpec.from_lines(rules))

    def should_exclude(self, entry: Entry, is_dir: bool) -> bool:
        try:
            relative = entry.path.relative_to(self._root).as_posix()
        except ValueError:
            return False
        if is_dir:
            relative += "/"
        return self._spec.match_file(relative)

"""Tree-compatible box-drawing output formatter."""

from __future__ import annotations

import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from treewalk.entry import Entry
from treewalk.formatter.info import InfoOptions, format_info


@dataclass(frozen=True, slots=True)
class Glyphs:
    """Box-drawing character set for tree rendering."""

    branch: str  # ├──
    last_branch: str  # └──
    vertical: str  # │
    space: str  # (indent)


UNICODE_GLYPHS = Glyphs(
    branch="├── ",
    last_branch="└── ",
    vertical="│   ",
    space="    ",
)

ASCII_GLYPHS = Glyphs(
    branch="|-- ",
    last_branch="\\-- ",
    vertical="|   ",
    space="    ",
)

RECURSIVE_LINK_NOTE = "  [recursive, not followed]"


@dataclass(frozen=True, slots=True)
class CompatOptions:
    """Options for compat formatter.

    Attributes:
        charset: Output charset, ``unicode`` or ``ascii``.
        full_path: Whether to print each entry's full path.
        no_indent: Whether to print names without tree connectors.
        no_report: Whether to omit summary report line.
        identify: Whether to append a file type indicator (``-F``).
        unprintable: ``question`` replaces unprintable characters with ``?``.
        info: Metadata columns to show before each name.
    """

    charset: Literal["unicode", "ascii"] = "unicode"
    full_path: bool = False
    no_indent: bool = False
    no_report: bool = False
    identify: bool = False
    unprintable: Literal["as_is", "question"] = "as_is"
    info: InfoOptions = field(default_factory=InfoOptions)


def _identify_suffix(entry: Entry) -> str:
    """Return the ``-F`` type indicator for an entry."""
    if entry.is_symlink:
        return "@"
    if entry.is_dir:
        return "/"
    if stat.S_ISFIFO(entry.mode):
        return "|"
    if stat.S_ISSOCK(entry.mode):
        return "="
    if entry.is_executable:
        return "*"
    return ""


def _display_name(entry: Entry, opts: CompatOptions) -> str:
    name = str(entry.path) if opts.full_path else entry.name
    if opts.unprintable == "question":
        name = "".join(ch if ch.isprintable() else "?" for ch in name)
    if opts.identify:
        name += _identify_suffix(entry)
    if entry.linked_path is not None:
        name += f" -> {entry.linked_path}"
        if entry.is_recursive_link:
            name += RECURSIVE_LINK_NOTE
    return name


def _report_line(dir_count: int, file_count: int) -> str:
    """Build GNU tree-like summary line.

    Args:
        dir_count: Number of directories.
        file_count: Number of files.

    Returns:
        str: Summary string with singular/plural inflection.
    """
    dir_word = "directory" if dir_count == 1 else "directories"
    file_word = "file" if file_count == 1 else "files"
    return f"{dir_count} {dir_word}, {file_count} {file_word}"


def format_compat(
    items: Iterable[tuple[int, Entry]],
    options: CompatOptions | None = None,
) -> str:
    """Render a walker stream as tree-compatible box-drawing text.

    The stream is consumed once. ``remaining`` decides between the
    interior and last-sibling connector, and the entry depth decides the
    indentation.

    Args:
        items: ``(remaining, entry)`` pairs in depth-first order.
        options: Compat rendering options.

    Returns:
        str: Full output including root line and optional summary report.
    """
    opts = options or CompatOptions()
    glyphs = ASCII_GLYPHS if opts.charset == "ascii" else UNICODE_GLYPHS

    lines: list[str] = []
    # open_levels[i] is True while level i + 1 still has siblings to come.
    open_levels: list[bool] = []
    dir_count = 0
    file_count = 0

    for remaining, entry in items:
        if entry.depth == 0:
            lines.append(str(entry.path))
            continue

        if entry.is_dir or entry.target_is_dir:
            dir_count += 1
        else:
            file_count += 1

        label = _display_name(entry, opts)
        info = format_info(entry, opts.info)
        if info:
            label = f"{info}  {label}"

        is_last = remaining <= 1
        del open_levels[entry.depth - 1 :]

        if opts.no_indent:
            lines.append(label)
        else:
            prefix = "".join(
                glyphs.vertical if is_open else glyphs.space for is_open in open_levels
            )
            connector = glyphs.last_branch if is_last else glyphs.branch
            lines.append(f"{prefix}{connector}{label}")

        open_levels.append(not is_last)

    if not opts.no_report:
        lines.append("")
        lines.append(_report_line(dir_count, file_count))

    return "\n".join(lines)

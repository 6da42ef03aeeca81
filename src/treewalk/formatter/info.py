"""Metadata bracket rendered before entry names."""

from __future__ import annotations

import stat
from dataclasses import dataclass
from datetime import datetime

from treewalk.entry import Entry
from treewalk.errors import UnsupportedMetadataError

DEFAULT_TIME_FORMAT = "%b %d %H:%M"

_SIZE_UNITS = "KMGTPE"


@dataclass(frozen=True, slots=True)
class InfoOptions:
    """Which metadata columns to show, in ``tree`` column order.

    Attributes:
        inode: Show the inode number (``--inodes``).
        device: Show the device id (``--device``).
        permissions: Show the ``ls``-style mode string (``-p``).
        user: Show the owning user (``-u``).
        group: Show the owning group (``-g``).
        size: Show the size in bytes (``-s``).
        human_size: Show the size with a unit suffix (``-h``).
        date: Show the modification time (``-D``).
        time_format: ``strftime`` format for the date column.
    """

    inode: bool = False
    device: bool = False
    permissions: bool = False
    user: bool = False
    group: bool = False
    size: bool = False
    human_size: bool = False
    date: bool = False
    time_format: str = DEFAULT_TIME_FORMAT


def format_human_size(size: int) -> str:
    """Format a byte count with a binary unit suffix, e.g. ``4.0K``.

    Args:
        size: Size in bytes.

    Returns:
        str: Plain bytes below 1024, otherwise one decimal below 10 units
        and whole units above.
    """
    if size < 1024:
        return str(size)
    value = float(size)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024:
            break
    if value < 10:
        return f"{value:.1f}{unit}"
    return f"{value:.0f}{unit}"


def _user_name(uid: int) -> str:
    import pwd

    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _group_name(gid: int) -> str:
    import grp

    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def format_info(entry: Entry, options: InfoOptions) -> str:
    """Build the ``[...]`` metadata bracket for an entry.

    Args:
        entry: Entry to describe.
        options: Selected columns.

    Returns:
        str: Bracketed columns, or an empty string when none are selected.
    """
    parts: list[str] = []
    if options.inode:
        parts.append(str(entry.inode))
    if options.device:
        parts.append(str(entry.device))
    if options.permissions:
        parts.append(stat.filemode(entry.mode))
    if options.user:
        try:
            parts.append(_user_name(entry.uid))
        except UnsupportedMetadataError:
            parts.append("?")
    if options.group:
        try:
            parts.append(_group_name(entry.gid))
        except UnsupportedMetadataError:
            parts.append("?")
    if options.human_size:
        parts.append(format_human_size(entry.size))
    elif options.size:
        parts.append(str(entry.size))
    if options.date:
        parts.append(datetime.fromtimestamp(entry.mtime).strftime(options.time_format))

    if not parts:
        return ""
    return f"[{' '.join(parts)}]"

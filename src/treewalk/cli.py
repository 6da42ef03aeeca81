"""CLI entry point for twalk: I/O boundary only."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from treewalk import TwalkError, __version__
from treewalk.errors import WalkError
from treewalk.formatter.compat import CompatOptions, format_compat
from treewalk.formatter.info import DEFAULT_TIME_FORMAT, InfoOptions
from treewalk.gitignore import GitignoreFilter
from treewalk.pattern import Pattern, PatternCompileError
from treewalk.walker import TreeConfig, Walker


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    ``-h`` selects human-readable sizes as in ``tree``, so help is only
    available as ``--help``.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``twalk`` command.
    """
    parser = argparse.ArgumentParser(
        prog="twalk",
        description="list directory contents as a tree",
        add_help=False,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Root directory to display (default: current directory)",
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # listing options
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        dest="visit_all",
        help="Include hidden files (starting with .)",
    )
    parser.add_argument(
        "-d",
        "--dirs-only",
        action="store_true",
        dest="dirs_only",
        help="List directories only",
    )
    parser.add_argument(
        "-l",
        "--follow",
        action="store_true",
        dest="follow_symlinks",
        help="Follow symbolic links to directories",
    )
    parser.add_argument(
        "-L",
        "--level",
        type=int,
        default=None,
        dest="max_depth",
        help="Max display depth of the directory tree",
    )
    parser.add_argument(
        "-P",
        dest="pattern_match",
        default=None,
        metavar="PATTERN",
        help="List only files matching the wildcard pattern",
    )
    parser.add_argument(
        "-I",
        dest="pattern_exclude",
        default=None,
        metavar="PATTERN",
        help="Do not list files matching the wildcard pattern",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help="Filter entries using the root .gitignore",
    )
    parser.add_argument(
        "--filelimit",
        type=int,
        default=None,
        dest="file_limit",
        metavar="N",
        help="Do not descend directories with more than N entries",
    )

    # sorting options
    parser.add_argument(
        "--dirsfirst",
        action="store_true",
        dest="dirs_first",
        help="List directories before files",
    )
    parser.add_argument(
        "-r",
        action="store_true",
        dest="rev_alpha_sort",
        help="Sort names in reverse alphabetic order",
    )
    parser.add_argument(
        "-t",
        action="store_true",
        dest="last_mod_sort",
        help="Sort by last modification time",
    )

    # file options
    parser.add_argument(
        "-f",
        action="store_true",
        dest="full_path",
        help="Print the full path prefix for each entry",
    )
    parser.add_argument(
        "-i",
        action="store_true",
        dest="no_indent",
        help="Do not print indentation lines",
    )
    parser.add_argument(
        "-F",
        action="store_true",
        dest="identify",
        help="Append a type indicator: / dirs, * executables, @ links, = sockets, | FIFOs",
    )
    unprintable = parser.add_mutually_exclusive_group()
    unprintable.add_argument(
        "-q",
        action="store_const",
        const="question",
        dest="unprintable",
        help="Print unprintable characters as '?'",
    )
    unprintable.add_argument(
        "-N",
        action="store_const",
        const="as_is",
        dest="unprintable",
        help="Print unprintable characters as is (default)",
    )
    parser.add_argument("-p", action="store_true", dest="permissions", help="Print permissions")
    parser.add_argument("-u", action="store_true", dest="user", help="Print file owner")
    parser.add_argument("-g", action="store_true", dest="group", help="Print file group")
    parser.add_argument("-s", action="store_true", dest="size", help="Print size in bytes")
    parser.add_argument(
        "-h",
        action="store_true",
        dest="human_size",
        help="Print size in a human readable way",
    )
    parser.add_argument(
        "-D",
        action="store_true",
        dest="date",
        help="Print the date of last modification",
    )
    parser.add_argument(
        "--timefmt",
        default=None,
        dest="time_format",
        metavar="FORMAT",
        help="strftime format for -D (implies -D)",
    )
    parser.add_argument("--inodes", action="store_true", dest="inode", help="Print inode number")
    parser.add_argument("--device", action="store_true", dest="device", help="Print device id")

    # output options
    parser.add_argument(
        "--noreport",
        action="store_true",
        dest="no_report",
        help="Omit the file/directory count report at the end",
    )
    parser.add_argument(
        "--charset",
        choices=["unicode", "ascii"],
        default="unicode",
        help="Character set for tree drawing (default: unicode)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        dest="output_file",
        help="Write output to a file instead of stdout",
    )
    return parser


def run_twalk(argv: list[str] | None = None) -> str:
    """Run twalk with provided CLI args and return formatted output.

    This function is intentionally side-effect free and is the primary
    test target for CLI behavior. Traversal errors are not reported here;
    see :func:`main`.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.

    Returns:
        str: Final rendered output.

    Raises:
        TwalkError: On any user-facing validation error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    output, _ = _run_with_args(args)
    return output


def _resolve_root(directory: str) -> Path:
    """Validate the directory argument, keeping it as spelled.

    Args:
        directory: Directory argument from CLI.

    Returns:
        Path: Root path for traversal and display.

    Raises:
        TwalkError: If directory does not exist or is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise TwalkError(f"'{directory}' is not a directory")
    return root


def _build_pattern(args: argparse.Namespace) -> Pattern | None:
    """Compile the ``-P`` or ``-I`` pattern, if any.

    Args:
        args: Parsed CLI namespace.

    Returns:
        Pattern | None: Compiled pattern, or ``None`` when neither is given.

    Raises:
        TwalkError: If both are given or the pattern is malformed.
    """
    if args.pattern_match is not None and args.pattern_exclude is not None:
        raise TwalkError("-P is incompatible with -I")
    if args.pattern_match is not None:
        text, inclusive = args.pattern_match, True
    elif args.pattern_exclude is not None:
        text, inclusive = args.pattern_exclude, False
    else:
        return None

    try:
        return Pattern.compile(text, inclusive=inclusive)
    except PatternCompileError as exc:
        raise TwalkError(f"invalid pattern: {exc}") from exc


def _validate_limits(args: argparse.Namespace) -> None:
    """Validate numeric limits.

    Args:
        args: Parsed CLI namespace.

    Raises:
        TwalkError: If ``-L`` or ``--filelimit`` is less than 1.
    """
    if args.max_depth is not None and args.max_depth < 1:
        raise TwalkError("Invalid level, must be greater than 0.")
    if args.file_limit is not None and args.file_limit < 1:
        raise TwalkError("Invalid file limit, must be greater than 0.")


def _build_config(args: argparse.Namespace, root: Path) -> TreeConfig:
    return TreeConfig(
        root=root,
        pattern=_build_pattern(args),
        visit_all=args.visit_all,
        dirs_only=args.dirs_only,
        max_depth=args.max_depth,
        dirs_first=args.dirs_first,
        rev_alpha_sort=args.rev_alpha_sort,
        last_mod_sort=args.last_mod_sort,
        follow_symlinks=args.follow_symlinks,
        file_limit=args.file_limit,
    )


def _build_compat_options(args: argparse.Namespace) -> CompatOptions:
    info = InfoOptions(
        inode=args.inode,
        device=args.device,
        permissions=args.permissions,
        user=args.user,
        group=args.group,
        size=args.size,
        human_size=args.human_size,
        date=args.date or args.time_format is not None,
        time_format=args.time_format or DEFAULT_TIME_FORMAT,
    )
    return CompatOptions(
        charset=args.charset,
        full_path=args.full_path,
        no_indent=args.no_indent,
        no_report=args.no_report,
        identify=args.identify,
        unprintable=args.unprintable or "as_is",
        info=info,
    )


def _run_with_args(args: argparse.Namespace) -> tuple[str, list[WalkError]]:
    """Run the walk/format pipeline for parsed arguments.

    Args:
        args: Parsed CLI namespace.

    Returns:
        tuple[str, list[WalkError]]: Rendered output and the per-entry
        errors collected while walking.

    Raises:
        TwalkError: On any user-facing validation error.
    """
    root = _resolve_root(args.directory)
    _validate_limits(args)
    config = _build_config(args, root)

    entry_filter = GitignoreFilter.from_root(root) if args.gitignore else None
    walker = Walker(config, entry_filter)
    output = format_compat(walker, _build_compat_options(args))
    return output, walker.errors


def main() -> None:
    """Run the CLI entry point with process arguments.

    Parses args exactly once and writes output to stdout or ``-o`` file.
    Traversal errors go to stderr without changing the exit code.
    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse

    try:
        output, errors = _run_with_args(args)
    except TwalkError as exc:
        sys.stderr.write(f"twalk: {exc}\n")
        sys.exit(1)

    if args.output_file:
        try:
            Path(args.output_file).write_text(
                output + "\n", encoding="utf-8", newline=""
            )
        except OSError as exc:
            sys.stderr.write(f"twalk: cannot write to '{args.output_file}': {exc}\n")
            sys.exit(1)
    else:
        sys.stdout.write(output + "\n")

    for error in errors:
        sys.stderr.write(f"twalk: {error}\n")

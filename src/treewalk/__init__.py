"""treewalk: lazy, filtered, depth-annotated directory traversal for tree rendering."""

__version__ = "0.1.0"


class TwalkError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments, missing directories, malformed
    patterns and other recoverable input errors. The message is
    printed to stderr and the process exits with code 1.
    """

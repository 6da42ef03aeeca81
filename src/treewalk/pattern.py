"""Wildcard name patterns: ``*``, ``?``, ``[set]``, ``[a-z]`` and ``![set]``.

The grammar is deliberately small and is not a regular expression
engine:

* ``*`` matches one or more characters. When more tokens follow, it
  consumes characters until one satisfies the next token and never
  backtracks.
* ``?`` matches exactly one character.
* ``[abc]`` matches one character from the set. ``a-z`` between two
  alphanumerics expands to a code point range, ``|`` separates ranges
  (``[a-z|0-9]``) and any other hyphen is a literal member.
* ``![abc]`` matches one character that is not in the set.
* Everything else, ``!`` included, is a literal.

A name matches once every token is satisfied. Characters left over after
the last token do not matter, so ``abc`` matches ``abcd``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Kinds of compiled pattern tokens."""

    LITERAL = "literal"
    ONE = "one"
    ONE_OR_MORE = "one_or_more"
    ONE_OF = "one_of"
    NONE_OF = "none_of"


@dataclass(frozen=True, slots=True)
class Token:
    """A single compiled pattern token.

    Attributes:
        kind: Token kind.
        chars: Member characters for literal and set tokens.
    """

    kind: TokenKind
    chars: frozenset[str] = frozenset()

    def matches(self, ch: str) -> bool:
        """Return whether a single character satisfies this token."""
        if self.kind is TokenKind.LITERAL or self.kind is TokenKind.ONE_OF:
            return ch in self.chars
        if self.kind is TokenKind.NONE_OF:
            return ch not in self.chars
        return True


class PatternCompileError(ValueError):
    """Malformed wildcard pattern.

    Attributes:
        pattern: The pattern text being compiled.
        position: Index of the offending character.
    """

    def __init__(self, message: str, pattern: str, position: int) -> None:
        self.pattern = pattern
        self.position = position
        super().__init__(f"{message} at position {position} in pattern '{pattern}'")


def _is_range_endpoint(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def _compile(text: str) -> tuple[Token, ...]:
    """Compile pattern text into tokens in a single left-to-right pass.

    Args:
        text: Wildcard pattern text.

    Returns:
        tuple[Token, ...]: Compiled token sequence.

    Raises:
        PatternCompileError: On an empty or unterminated bracket group,
            a stray ``]`` or a range without an end.
    """
    tokens: list[Token] = []
    group: list[str] | None = None
    group_start = 0
    negated = False
    # A reversed range empties ``group`` without the group being empty.
    written = False

    i = 0
    while i < len(text):
        ch = text[i]

        if group is None:
            if ch == "*":
                tokens.append(Token(TokenKind.ONE_OR_MORE))
            elif ch == "?":
                tokens.append(Token(TokenKind.ONE))
            elif ch == "[":
                group = []
                group_start = i
                written = False
            elif ch == "]":
                raise PatternCompileError("unmatched ']'", text, i)
            elif ch == "!" and text[i + 1 : i + 2] == "[":
                negated = True
            else:
                tokens.append(Token(TokenKind.LITERAL, frozenset(ch)))
            i += 1
            continue

        if ch == "]":
            if not written:
                raise PatternCompileError("empty bracket group", text, i)
            kind = TokenKind.NONE_OF if negated else TokenKind.ONE_OF
            tokens.append(Token(kind, frozenset(group)))
            group = None
            negated = False
        elif ch == "-" and group and _is_range_endpoint(group[-1]):
            if i + 1 >= len(text):
                raise PatternCompileError("range is missing its end", text, i)
            end = text[i + 1]
            if _is_range_endpoint(end):
                start = group.pop()
                group.extend(chr(code) for code in range(ord(start), ord(end) + 1))
                i += 2
                continue
            group.append(ch)
        elif ch != "|":
            group.append(ch)
        written = True
        i += 1

    if group is not None:
        raise PatternCompileError("unterminated bracket group", text, group_start)

    return tuple(tokens)


@dataclass(frozen=True, slots=True)
class Pattern:
    """A compiled wildcard pattern.

    Attributes:
        text: Source pattern text.
        tokens: Compiled tokens; never re-parsed after compilation.
        inclusive: ``True`` keeps matching names, ``False`` drops them.
    """

    text: str
    tokens: tuple[Token, ...]
    inclusive: bool = True

    @classmethod
    def compile(cls, text: str, inclusive: bool = True) -> Pattern:
        """Compile ``text`` into a pattern.

        Args:
            text: Wildcard pattern text.
            inclusive: Whether matches are kept (``-P``) or dropped (``-I``).

        Returns:
            Pattern: Compiled pattern.

        Raises:
            PatternCompileError: If ``text`` is malformed.
        """
        return cls(text=text, tokens=_compile(text), inclusive=inclusive)

    def is_match(self, name: str) -> bool:
        """Return whether ``name`` satisfies every token of the pattern.

        Args:
            name: Candidate name.

        Returns:
            bool: ``True`` when every token is satisfied before ``name``
            runs out. Trailing characters are ignored.
        """
        chars = iter(name)
        tokens = iter(self.tokens)

        for token in tokens:
            ch = next(chars, None)
            if ch is None:
                return False

            if token.kind is TokenKind.ONE_OR_MORE:
                following = next(tokens, None)
                if following is None:
                    return True
                # ch was consumed by the wildcard; scan for the next token.
                if not any(following.matches(c) for c in chars):
                    return False
            elif not token.matches(ch):
                return False

        return True

    def keeps(self, name: str) -> bool:
        """Return whether ``name`` survives this pattern as a filter."""
        return self.is_match(name) == self.inclusive

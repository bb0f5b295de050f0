"""
Glob-style matching of branch names against wildcard patterns.

Supported syntax:
- ``*`` matches any run of characters, ``/`` included
- ``?`` matches exactly one character
- ``[abc]``, ``[a-z]``, ``[!a]`` / ``[^a]`` character classes
- ``{a,b}`` alternation
- ``\\`` escapes the next character

Matching is case-sensitive and anchored. A pattern that cannot be compiled
(unterminated class or alternation, trailing escape, nested braces) matches
nothing.
"""

import functools
import re
from typing import Optional, Pattern


COMPILED_PATTERN_CACHE_SIZE = 512


class InvalidPatternError(ValueError):
    """Raised when a wildcard pattern cannot be compiled."""
    pass


def translate(pattern: str) -> str:
    """
    Translate a wildcard pattern into an anchored regular expression.

    Args:
        pattern: Wildcard pattern

    Returns:
        Regular expression source matching the whole value

    Raises:
        InvalidPatternError: If the pattern is malformed
    """
    parts = []
    in_braces = False
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]
        i += 1

        if char == "*":
            # Collapse runs of '*' ('**' behaves like '*')
            while i < n and pattern[i] == "*":
                i += 1
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "\\":
            if i >= n:
                raise InvalidPatternError(f"Dangling escape in pattern: {pattern!r}")
            parts.append(re.escape(pattern[i]))
            i += 1
        elif char == "[":
            start = i
            if start < n and pattern[start] in "!^":
                start += 1
            # A ']' right after the opening (or the negation) is literal
            if start < n and pattern[start] == "]":
                start += 1
            end = pattern.find("]", start)
            if end < 0:
                raise InvalidPatternError(f"Unclosed character class in pattern: {pattern!r}")
            body = pattern[i:end]
            i = end + 1
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            if not body:
                raise InvalidPatternError(f"Empty character class in pattern: {pattern!r}")
            body = body.replace("\\", "\\\\")
            parts.append(f"[{'^' if negate else ''}{body}]")
        elif char == "{":
            if in_braces:
                raise InvalidPatternError(f"Nested alternation in pattern: {pattern!r}")
            in_braces = True
            parts.append("(?:")
        elif char == "," and in_braces:
            parts.append("|")
        elif char == "}" and in_braces:
            in_braces = False
            parts.append(")")
        else:
            parts.append(re.escape(char))

    if in_braces:
        raise InvalidPatternError(f"Unclosed alternation in pattern: {pattern!r}")

    return "(?s:" + "".join(parts) + r")\Z"


@functools.lru_cache(maxsize=COMPILED_PATTERN_CACHE_SIZE)
def compile_pattern(pattern: str) -> Optional[Pattern[str]]:
    """Return the compiled expression for ``pattern``, or None if it is invalid."""
    try:
        return re.compile(translate(pattern))
    except (InvalidPatternError, re.error):
        return None


class PatternMatcher:
    """
    Matches values against wildcard patterns.

    Holds no state; compiled expressions come from the bounded
    ``compile_pattern`` cache, and a pattern that fails to compile never
    matches.
    """

    __slots__ = ()

    def compile(self, pattern: str) -> Optional[Pattern[str]]:
        return compile_pattern(pattern)

    def matches(self, pattern: str, value: str) -> bool:
        """
        Check whether ``value`` fully matches ``pattern``.

        Args:
            pattern: Wildcard pattern
            value: Value to test, typically a short branch name

        Returns:
            True if the whole value matches, False otherwise or if the
            pattern is invalid
        """
        compiled = self.compile(pattern)
        if compiled is None:
            return False
        return compiled.match(value) is not None

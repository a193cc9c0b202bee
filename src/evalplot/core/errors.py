"""
Core exception types raised by pivot classification and option resolution.

Provides typed exceptions for core-domain failures:
- PivotError for unusable classifier input (empty file list, confidence out of range).
- OptionError for chart option overrides that cannot be applied.
- OptionArityError for override entries with zero or more than one value token.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Every error carries the offending path or option key in its message so the CLI
      can surface it unchanged.

Examples:
    Catch a malformed override.

    >>> from evalplot.core.errors import OptionArityError
    >>> from evalplot.core.options import parse_assignment
    >>> try:
    ...     parse_assignment("a=b=c")
    ... except OptionArityError as e:
    ...     msg = str(e)
    >>> "a=b=c" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "PivotError",
    "OptionError",
    "OptionArityError",
]


class PivotError(ValueError):
    """Classifier input that cannot produce pivots (empty input set, bad confidence)."""


class OptionError(ValueError):
    """Chart option override that names an unknown option or carries an invalid value."""


class OptionArityError(OptionError):
    """Override entry that does not split into a name and at most one value."""

    def __init__(self, entry: str, tokens: int) -> None:
        super().__init__(
            f"option {entry!r} must be 'name' or 'name=value' (got {tokens} token(s))"
        )
        self.entry = entry
        self.tokens = tokens

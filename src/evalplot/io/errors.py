"""
Custom exceptions for the evalplot.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in evalplot.io.
- Keep evalplot.core as the source of truth for pivot/option errors (see evalplot.core.errors).

Source of truth and boundaries
- evalplot.core.errors.PivotError and OptionError are raised by classifier/resolver code.
- evalplot.io raises Io* errors for filesystem/runtime concerns:
  - ConfigError: invalid destination or runtime configuration.
  - ScriptWriteError: the generated program cannot be opened for writing.
  - InputReadError: an input CSV cannot be opened or parsed.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class IoError(Exception):
    """
    Base class for IO-related errors in evalplot.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from evalplot.core errors.
    """


class ConfigError(IoError):
    """
    Raised when destination or runtime configuration is invalid.

    Examples:
        - confidence outside [0, 100]
        - non-integer ncol
    """


class ScriptWriteError(IoError):
    """
    Raised when ``<basename>.R`` cannot be opened or written.

    Notes:
        Report generation stops; no partial artifact is guaranteed.
    """


class InputReadError(IoError):
    """Raised when an input result file cannot be opened or parsed."""

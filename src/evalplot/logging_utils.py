"""
Console logging for the evalplot command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are installed here,
once, by the command-line host.
"""

from __future__ import annotations

import logging

ROOT_LOGGER = "evalplot"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(filename)s:%(lineno)d]: %(message)s"


def configure_logging(verbose: bool = False, *, force: bool = False) -> logging.Logger:
    """
    Install a stderr handler and set the ``evalplot`` logger level.

    Args:
        verbose: Debug level with timestamps and source locations.
        force: Replace handlers installed by an earlier call.

    Returns:
        logging.Logger: The ``evalplot`` package logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=VERBOSE_FORMAT if verbose else LOG_FORMAT, force=force)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def log_exception(logger: logging.Logger, exc: BaseException) -> str:
    """Log ``exc`` as one error line tagged with its type; the traceback goes to debug."""
    message = f"{type(exc).__name__}: {exc}"
    logger.error(message)
    logger.debug("Traceback:", exc_info=exc)
    return message


__all__ = [
    "ROOT_LOGGER",
    "LOG_FORMAT",
    "VERBOSE_FORMAT",
    "configure_logging",
    "log_exception",
]

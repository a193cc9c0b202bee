"""
External collaborators: the R interpreter and the artifact viewer.

Responsibilities
- run_rscript(): execute a generated program and report success as a bool.
- show_file(): hand a rendered artifact to the platform viewer.

Notes
- Both calls block until the child process exits; no timeout is applied.
- A failing script is not an exception: it is logged and reported as False, and the
  script is left on disk for inspection.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys

from .config import RuntimeSettings

__all__ = [
    "run_rscript",
    "show_file",
]

logger = logging.getLogger(__name__)


def run_rscript(script_path: str, settings: RuntimeSettings | None = None) -> bool:
    """
    Run ``script_path`` with the configured interpreter.

    Args:
        script_path: Generated program.
        settings: Runtime settings (interpreter executable); defaults if None.

    Returns:
        bool: True if the interpreter exited with status 0.
    """
    settings = settings or RuntimeSettings()
    cmd = [settings.rscript, script_path]
    logger.info("Running %s", " ".join(cmd))
    try:
        r = subprocess.run(cmd, check=False, capture_output=True, text=True)
    except OSError as exc:
        logger.error("Failed to start %s: %s", settings.rscript, exc)
        return False
    if r.returncode != 0:
        logger.error(
            "%s exited with status %d; script kept at %s\n%s",
            settings.rscript,
            r.returncode,
            script_path,
            (r.stderr or "").strip(),
        )
        return False
    return True


def show_file(path: str, settings: RuntimeSettings | None = None) -> None:
    """Open a rendered artifact with the configured or platform default viewer."""
    settings = settings or RuntimeSettings()
    if settings.open_command:
        cmd = [settings.open_command, path]
    elif sys.platform == "darwin":
        cmd = ["open", path]
    elif os.name == "nt":
        os.startfile(path)  # type: ignore[attr-defined]
        return
    else:
        cmd = ["xdg-open", path]
    try:
        subprocess.run(cmd, check=False)
    except OSError as exc:
        logger.warning("Could not open %s: %s", path, exc)

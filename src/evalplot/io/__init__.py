"""
evalplot.io — Configuration, input probes and runtime collaborators.

## Responsibilities
- Carry runtime configuration (interpreter, SDK path) loaded from env/TOML.
- Describe report destinations (output path, smoothing, confidence, overrides).
- Probe input CSVs where a report needs data-dependent choices (Polars, read-only).
- Invoke the external interpreter and artifact viewer.

## Public API
- RuntimeSettings — execution settings (env > TOML > defaults).
- Destination — output path plus report parameters.
- files_have_single_point — detection-report geometry probe.
- run_rscript / show_file — collaborator calls.

## Import DAG discipline
- Depends only on stdlib, polars, and evalplot.core.
- MUST NOT import evalplot.script or evalplot.reports.
"""

from __future__ import annotations

from .config import Destination, RuntimeSettings
from .read import files_have_single_point
from .runtime import run_rscript, show_file

__all__ = [
    "Destination",
    "RuntimeSettings",
    "files_have_single_point",
    "run_rscript",
    "show_file",
]

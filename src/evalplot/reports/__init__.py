"""
evalplot.reports — Report variants and the command-line host.

## Public API
- plot — recognition report (ROC, DET, IET, CMC, score histogram, galleries).
- plot_detection — detection report (discrete/continuous ROC and PR, overlap).
- plot_landmarking — landmarking report (sample images, error table, ECDF).
- plot_metadata — per-column violin charts.

Each variant returns True when the program was written and rendered successfully.

## Import DAG discipline
- Top of the stack: may import evalplot.core, evalplot.io and evalplot.script.
"""

from __future__ import annotations

from .detection import plot_detection
from .landmarking import plot_landmarking
from .metadata import plot_metadata
from .recognition import plot

__all__ = [
    "plot",
    "plot_detection",
    "plot_landmarking",
    "plot_metadata",
]

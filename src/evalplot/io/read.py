"""
Read probes over input result files.

Overview
- count_plot_rows(): number of rows whose ``Plot`` label contains a given name.
- files_have_single_point(): True when any input contributes at most one DiscreteROC point.

Notes
- Inputs are evaluation CSVs with a leading ``Plot`` column plus ``X``/``Y``. Only the
  ``Plot`` column is read (lazily, via Polars).
- A file without a ``Plot`` column, or an empty file, has zero matching rows.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

import polars as pl

from .errors import InputReadError

__all__ = [
    "count_plot_rows",
    "files_have_single_point",
]


def count_plot_rows(path: str | os.PathLike[str], label: str) -> int:
    """
    Count rows of ``path`` whose ``Plot`` column contains ``label``.

    Args:
        path: CSV result file.
        label: Substring to match, e.g. ``"DiscreteROC"``.

    Returns:
        int: Number of matching rows.

    Raises:
        InputReadError: If the file cannot be opened or parsed.
    """
    try:
        lf = pl.scan_csv(os.fspath(path), infer_schema_length=0)
        if "Plot" not in lf.collect_schema().names():
            return 0
        return int(
            lf.select(pl.col("Plot").str.contains(label, literal=True).sum()).collect().item() or 0
        )
    except pl.exceptions.NoDataError:
        return 0
    except (OSError, pl.exceptions.PolarsError) as exc:
        raise InputReadError(f"Failed to open {os.fspath(path)} for reading: {exc}") from exc


def files_have_single_point(files: Iterable[str | os.PathLike[str]], label: str = "DiscreteROC") -> bool:
    """Return True if any file has at most one ``label`` row (points instead of lines)."""
    return any(count_plot_rows(f, label) <= 1 for f in files)

"""
Metadata report: one violin chart per requested column, grouped by the major pivot.

Each chart is also saved to ``<column>.pdf`` in the working directory of the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence

from evalplot.core.constants import METADATA_DESTINATION
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.script.engine import ScriptEngine
from evalplot.script.ir import Chain, Chart, Save, Str, call

__all__ = ["plot_metadata", "split_columns"]

logger = logging.getLogger(__name__)


def split_columns(columns: str | Sequence[str]) -> list[str]:
    """Accept ``"a;b"`` or a sequence of names; blanks are dropped."""
    if isinstance(columns, str):
        columns = columns.split(";")
    return [c.strip() for c in columns if c.strip()]


def plot_metadata(
    files: Iterable[str | os.PathLike[str]],
    columns: str | Sequence[str],
    show: bool = False,
    *,
    destination: Destination | str | os.PathLike[str] = METADATA_DESTINATION,
    settings: RuntimeSettings | None = None,
    execute: bool = True,
) -> bool:
    """
    Build and run the metadata report.

    Args:
        files: Metadata CSVs.
        columns: Columns to chart, ``;``-separated or as a sequence.
        show: Open the artifact after a successful run.
        destination: Output path; ``PlotMetadata`` (pdf) by default.
        settings: Runtime settings; loaded from env/TOML when None.
        execute: If False, only write the script.

    Raises:
        PivotError: On an empty file list.
        ScriptWriteError: If the script cannot be written.
    """
    files = list(files)
    names = split_columns(columns)
    logger.debug("Plotting %d metadata file(s) for columns %s", len(files), ";".join(names))

    engine = ScriptEngine(files, Destination.coerce(destination), settings or RuntimeSettings.load())
    group = engine.pivots.major.header
    for column in names:
        engine.emit(
            Chart(
                Chain(
                    (
                        call("qplot", group, column, data="data", geom=Str("violin"), fill=group),
                        "coord_flip()",
                        "theme_minimal()",
                    )
                )
            ),
            Save(f"{column}.pdf"),
        )
    return engine.finalize(show, execute=execute)

"""
Detection report.

The combined ``data`` relation is split by its ``Plot`` column into the discrete and
continuous ROC/PR curves, the per-detection overlap distribution and the average overlap
table, then ``data`` is dropped.

Notes
- Curves are drawn as points instead of lines when any input holds at most one
  DiscreteROC row (a single operating point has no line to draw).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from evalplot.core.grammar import DetectionRelation
from evalplot.core.options import DETECTION_DEFAULTS, ChartOptions, resolve_options
from evalplot.core.pivots import PivotState
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.io.read import files_have_single_point
from evalplot.script.engine import ScriptEngine
from evalplot.script.ir import Assign, Blank, Chain, Chart, Comment, Remove, Str, Subset, call

__all__ = ["plot_detection", "resolve_detection_options"]

logger = logging.getLogger(__name__)

KINDS: tuple[str, ...] = ("Discrete", "Continuous")

# (option set, relation suffix)
CURVES: tuple[tuple[str, str], ...] = (("rocOptions", "ROC"), ("prOptions", "PR"))


def resolve_detection_options(destination: Destination) -> dict[tuple[str, str], ChartOptions]:
    """Options per (option set, kind); each chart is titled by its kind."""
    return {
        (name, kind): resolve_options(
            name, destination.overrides(name), defaults=DETECTION_DEFAULTS, title=kind
        )
        for name, _ in CURVES
        for kind in KINDS
    }


def split_statements() -> list:
    stmts: list = [
        Comment("Split data into individual plots"),
        Assign("plot_index", 'which(names(data)=="Plot")'),
    ]
    stmts.extend(Subset(rel.value, rel.value) for rel in DetectionRelation)
    stmts.extend([Remove("data"), Blank()])
    return stmts


def overlap_histogram(p: PivotState) -> Chain:
    layers: list = [
        call(
            "qplot",
            "X",
            data=DetectionRelation.OVERLAP.value,
            geom=Str("histogram"),
            position=Str("identity"),
            xlab=Str("Overlap"),
            ylab=Str("Frequency"),
        ),
        "theme_minimal()",
        call("scale_x_continuous", minor_breaks="NULL"),
        call("scale_y_continuous", minor_breaks="NULL"),
        call(
            "theme",
            **{
                "axis.text.y": "element_blank()",
                "axis.ticks": "element_blank()",
                "axis.text.x": call("element_text", angle=-90, hjust=0),
            },
        ),
    ]
    if p.major.multi:
        if p.minor.multi:
            layers.append(call("facet_grid", f"{p.major.header} ~ {p.minor.header}", scales=Str("free")))
        else:
            layers.append(call("facet_wrap", f"~ {p.major.header}", scales=Str("free")))
    layers.append(call("theme", **{"aspect.ratio": 1, "legend.position": Str("bottom")}))
    return Chain(tuple(layers))


def _overlap_axes(p: PivotState) -> tuple[str, str]:
    x = p.minor.header if p.minor.multi else "'X'"
    y = p.major.header if p.major.multi else "'Y'"
    return x, y


def _unlabelled(p: PivotState) -> list:
    layers: list = []
    if not p.minor.multi:
        layers.append(call("xlab", "NULL"))
    if not p.major.multi:
        layers.append(call("ylab", "NULL"))
    return layers


def average_overlap_text(p: PivotState) -> Chain:
    x, y = _overlap_axes(p)
    layers: list = [
        call(
            "ggplot",
            DetectionRelation.AVERAGE_OVERLAP.value,
            call("aes", x=x, y=y, label="round(X,3)"),
            main=Str("Average Overlap"),
        ),
        "geom_text()",
        "theme_minimal()",
    ]
    return Chain(tuple(layers + _unlabelled(p)))


def average_overlap_tiles(p: PivotState) -> Chain:
    x, y = _overlap_axes(p)
    layers: list = [
        call("ggplot", DetectionRelation.AVERAGE_OVERLAP.value, call("aes", x=x, y=y, fill="X")),
        "geom_tile()",
        call("scale_fill_continuous", Str("Average Overlap")),
        "theme_minimal()",
    ]
    return Chain(tuple(layers + _unlabelled(p)))


def plot_detection(
    files: Iterable[str | os.PathLike[str]],
    destination: Destination | str | os.PathLike[str],
    show: bool = False,
    *,
    settings: RuntimeSettings | None = None,
    execute: bool = True,
) -> bool:
    """
    Build and run the detection report.

    Raises:
        PivotError: On an empty file list.
        OptionError: On invalid rocOptions/prOptions overrides.
        InputReadError: If an input cannot be probed for its DiscreteROC rows.
        ScriptWriteError: If the script cannot be written.
    """
    files = list(files)
    dest = Destination.coerce(destination)
    logger.debug("Plotting %d detection file(s) to %s", len(files), dest.path)
    opts = resolve_detection_options(dest)
    geom = "point" if files and files_have_single_point(files) else "line"

    engine = ScriptEngine(files, dest, settings or RuntimeSettings.load())
    engine.emit(*split_statements())
    for name, suffix in CURVES:
        for kind in KINDS:
            engine.qplot(geom, kind + suffix, False, opts[(name, kind)])

    p = engine.pivots
    engine.emit(
        Chart(overlap_histogram(p)),
        Chart(average_overlap_text(p)),
        Chart(average_overlap_tiles(p)),
    )
    return engine.finalize(show, execute=execute)

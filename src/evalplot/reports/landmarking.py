"""
Landmarking report.

Relations split out of ``data``: Box (per-landmark normalized error), Sample (an example
image with its landmark count), EXT/EXP (ground-truth and predicted landmark images per
algorithm) and NormLength (average inter-pupil distance).

Pages: the sample image, predicted-vs-truth image pairs per algorithm, an error table
(mean ± ci per landmark and algorithm, plus Aggregate and Average IPD rows), then ECDF,
box-with-jitter and violin charts of the normalized error.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from evalplot.core.grammar import LandmarkRelation
from evalplot.core.pivots import PivotState
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.script.engine import ScriptEngine, read_image
from evalplot.script.ir import (
    Assign,
    Blank,
    Chain,
    Chart,
    Comment,
    Eval,
    For,
    Function,
    If,
    Library,
    Remove,
    Return,
    Str,
    Subset,
    Summarize,
    call,
)

__all__ = ["plot_landmarking"]

logger = logging.getLogger(__name__)

ERROR_BREAKS = "c(0.001,0.01,0.1,1,10)"


def split_statements() -> list:
    box = LandmarkRelation.BOX.value
    stmts: list = [
        Comment("Split data into individual plots"),
        Assign("plot_index", 'which(names(data)=="Plot")'),
        Subset(box, box),
        Assign(f"{box}$X", f"factor({box}$X, levels = {box}$X, ordered = TRUE)"),
    ]
    for rel in (LandmarkRelation.SAMPLE, LandmarkRelation.EXT, LandmarkRelation.EXP):
        stmts.append(Subset(rel.value, rel.value))
        stmts.append(Assign(f"{rel.value}$X", f"as.character({rel.value}$X)"))
    stmts.extend(
        [
            Subset(LandmarkRelation.NORM_LENGTH.value, LandmarkRelation.NORM_LENGTH.value),
            Remove("data"),
            Blank(),
        ]
    )
    return stmts


def helper_functions() -> list:
    """``readData`` (decode every image of a path/value relation) and ``plotImage``."""
    read_data = Function(
        "readData",
        ("data",),
        (
            Assign("examples", "list()"),
            For(
                "i",
                "1:nrow(data)",
                (
                    Assign("path", "data[i,1]"),
                    Assign("value", "data[i,2]"),
                    Assign("file", 'unlist(strsplit(path, "[.]"))[1]'),
                    Assign("ext", 'unlist(strsplit(path, "[.]"))[2]'),
                    read_image("img", "ext", "path"),
                    Assign("example", "list(file = file, value = value, image = img)"),
                    Assign("examples[[i]]", "example"),
                ),
            ),
            Return("examples"),
        ),
    )
    panel = Chain(
        (
            call("qplot", "1:10", "1:10", geom=Str("blank")),
            call(
                "annotation_custom",
                "rasterGrob(image$image)",
                xmin="-Inf",
                xmax="Inf",
                ymin="-Inf",
                ymax="Inf",
            ),
            call(
                "theme",
                **{
                    "axis.line": "element_blank()",
                    "axis.title.y": "element_blank()",
                    "axis.text.x": "element_blank()",
                    "axis.text.y": "element_blank()",
                    "line": "element_blank()",
                    "axis.ticks": "element_blank()",
                    "panel.background": "element_blank()",
                },
            ),
            call("labs", title="title"),
            call("xlab", "label"),
        )
    )
    plot_image = Function(
        "plotImage",
        ("image", "title=NULL", "label=NULL"),
        (Assign("p", panel), Return("p")),
    )
    return [
        Blank(),
        read_data,
        Blank(),
        Library("jpeg"),
        Library("png"),
        Library("grid"),
        Blank(),
        plot_image,
        Blank(),
    ]


def sample_pages(p: PivotState) -> list:
    pair = call(
        "multiplot",
        call(
            "plotImage",
            "predictedSample[[i]]",
            'sprintf("%s\\nPredicted Landmarks",algs[[j]])',
            'sprintf("Average Landmark Error: %.3f",predictedSample[[i]]$value)',
        ),
        call("plotImage", "truthSample[[i]]", '"Ground Truth\\nLandmarks"', Str("")),
        cols=2,
    )
    return [
        Assign("sample", "readData(Sample)"),
        Assign("rows", "sample[[1]]$value"),
        Assign("algs", f"unique(Box${p.group_header})"),
        Assign("algs", "algs[!duplicated(algs)]"),
        Eval(
            call(
                "print",
                call(
                    "plotImage",
                    "sample[[1]]",
                    Str("Sample Landmarks"),
                    'sprintf("Total Landmarks: %s",sample[[1]]$value)',
                ),
            )
        ),
        If(
            "nrow(EXT) != 0 && nrow(EXP) != 0",
            (
                For(
                    "j",
                    "1:length(algs)",
                    (
                        Assign("truthSample", "readData(EXT[EXT$. == algs[[j]],])"),
                        Assign("predictedSample", "readData(EXP[EXP$. == algs[[j]],])"),
                        For("i", "1:length(predictedSample)", (Eval(pair),)),
                    ),
                ),
            ),
        ),
        Blank(),
    ]


def error_table(p: PivotState) -> list:
    group = p.group_header
    cell = 'paste(as.character(round({0}$Y, 3)), round({0}$ci, 3), sep=" \\u00b1 ")'
    return [
        Comment("Code to format error table"),
        Summarize("Box", "Y", (group, "X"), target="StatBox"),
        Summarize("Box", "Y", (group,), target="OverallStatBox"),
        Assign(
            "mat",
            call("matrix", cell.format("StatBox"), nrow="rows", ncol="length(algs)", byrow=False),
        ),
        Assign("mat", call("rbind", "mat", cell.format("OverallStatBox"))),
        Assign("mat", call("rbind", "mat", "as.character(round(NormLength$Y, 3))")),
        Assign("colnames(mat)", "algs"),
        Assign("rownames(mat)", 'c(seq(0,rows-1),"Aggregate","Average IPD")'),
        Assign("ETable", "as.table(mat)"),
        Blank(),
        Eval("print(textplot(ETable))"),
        Eval('print(title("Landmarking Error Rates"))'),
    ]


def _encodings(p: PivotState) -> dict[str, str]:
    enc: dict[str, str] = {}
    if p.major.multi:
        enc["colour"] = p.major.header
    if p.minor.multi:
        enc["linetype"] = p.minor.header
    return enc


def error_charts(p: PivotState) -> list[Chart]:
    enc = _encodings(p)
    log_y = call("scale_y_log10", Str("Normalized Error"), breaks=ERROR_BREAKS)
    ecdf = Chain(
        (
            call("ggplot", "Box", call("aes", "Y", **enc)),
            call("annotation_logticks", sides=Str("b")),
            "stat_ecdf()",
            call("scale_x_log10", Str("Normalized Error"), breaks=ERROR_BREAKS),
            call("scale_y_continuous", Str("Cumulative Density"), label="percent"),
            "theme_minimal()",
        )
    )
    box = Chain(
        (
            call("ggplot", "Box", call("aes", "factor(X)", "Y", **enc)),
            call("annotation_logticks", sides=Str("l")),
            call("geom_boxplot", alpha=0.5),
            call("geom_jitter", size=1, alpha=0.5),
            call("scale_x_discrete", Str("Landmark")),
            log_y,
            "theme_minimal()",
        )
    )
    violin = Chain(
        (
            call("ggplot", "Box", call("aes", "factor(X)", "Y", **enc)),
            call("annotation_logticks", sides=Str("l")),
            call("geom_violin", alpha=0.5),
            call("scale_x_discrete", Str("Landmark")),
            log_y,
        )
    )
    return [Chart(ecdf), Chart(box), Chart(violin)]


def plot_landmarking(
    files: Iterable[str | os.PathLike[str]],
    destination: Destination | str | os.PathLike[str],
    show: bool = False,
    *,
    settings: RuntimeSettings | None = None,
    execute: bool = True,
) -> bool:
    """
    Build and run the landmarking report.

    Raises:
        PivotError: On an empty file list.
        ScriptWriteError: If the script cannot be written.
    """
    files = list(files)
    dest = Destination.coerce(destination)
    logger.debug("Plotting %d landmarking file(s) to %s", len(files), dest.path)

    engine = ScriptEngine(files, dest, settings or RuntimeSettings.load())
    p = engine.pivots
    engine.emit(*split_statements())
    engine.emit(*helper_functions())
    engine.emit(*sample_pages(p))
    engine.emit(*error_table(p))
    engine.emit(*error_charts(p))
    return engine.finalize(show, execute=execute)

"""
Script synthesis engine and execution finalizer.

Given classified pivots and resolved chart options, the engine appends the statements
of one R program to a ScriptDocument: the shared preamble (formatting library, data
loads, output device), chart declarations, statistical pre-aggregation, metadata tables
and diagnostic image galleries. finalize() closes the device, writes the program and
hands it to the interpreter.

Statement order (shared preamble)
1. ``source(<sdk>/share/openbr/plotting/plot_utils.R)``
2. ``data <- NULL`` then one Load per input (read, tag with pivot labels, rbind)
3. output device for the destination suffix
4. report-specific statements (see evalplot.reports)

Notes
- Chart declarations depend on pivots only through ``major``/``minor`` sizes and
  headers, the smoothing flags, the confidence and ``ncol``.
- Collaborators (interpreter, viewer) are injectable for tests.

References
- ir: src/evalplot/script/ir.py (statement nodes)
- render: src/evalplot/script/render.py (R serialization)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Sequence
from functools import reduce

from evalplot.core.constants import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    ERRORBAR_STRIDE,
    IMAGE_READERS,
    PLOT_UTILS_RELPATH,
)
from evalplot.core.grammar import SMOOTHED_RELATIONS, Device, Relation, device_for_suffix
from evalplot.core.options import ChartOptions
from evalplot.core.pivots import PivotState, classify_pivots
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.io.runtime import run_rscript, show_file

from .document import ScriptDocument
from .ir import (
    Assign,
    Blank,
    Call,
    Chain,
    Chart,
    CloseDevice,
    Comment,
    Eval,
    For,
    If,
    Library,
    Load,
    Next,
    OpenDevice,
    Source,
    Statement,
    Str,
    Summarize,
    Table,
    Vector,
    call,
)

__all__ = [
    "ScriptEngine",
    "get_scale",
    "load_statements",
    "METADATA_TABLES",
]

logger = logging.getLogger(__name__)

Runner = Callable[[str, RuntimeSettings], bool]
Opener = Callable[[str, RuntimeSettings], None]

# (relation, table name, column labels)
METADATA_TABLES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (
        Relation.TF.value,
        "Table of True Accept Rates at various False Accept Rates",
        ("FAR = 1e-06", "FAR = 1e-05", "FAR = 1e-04", "FAR = 1e-03", "FAR = 1e-02", "FAR = 1e-01"),
    ),
    (
        Relation.FT.value,
        "Table of False Accept Rates at various True Accept Rates",
        ("TAR = 0.40", "TAR = 0.50", "TAR = 0.65", "TAR = 0.75", "TAR = 0.85", "TAR = 0.95"),
    ),
    (
        Relation.CT.value,
        "Table of retrieval rate at various ranks",
        ("Rank 1", "Rank 5", "Rank 10", "Rank 20", "Rank 50", "Rank 100"),
    ),
    (Relation.TS.value, "Template Size by Algorithm", ("Template Size (bytes):",)),
)


def get_scale(mode: str, title: str, vals: int) -> Call:
    """
    Discrete colour/fill scale for a dimension with ``vals`` distinct labels.

    Args:
        mode: ``"colour"`` or ``"fill"``.
        title: Legend title (the dimension header).
        vals: Dimension cardinality.

    Returns:
        Call: ``scale_<mode>_discrete`` above 12 values, otherwise a brewer scale with
        ``Set3`` (12), ``Paired`` (10-11) or ``Set1`` (up to 9).
    """
    if vals > 12:
        return call(f"scale_{mode}_discrete", Str(title))
    if vals > 11:
        palette = "Set3"
    elif vals > 9:
        palette = "Paired"
    else:
        palette = "Set1"
    return call(f"scale_{mode}_brewer", Str(title), palette=Str(palette))


def _fold_load(acc: tuple[Load, ...], item: tuple[str, tuple[str, ...]], headers: Sequence[str]) -> tuple[Load, ...]:
    path, labels = item
    return acc + (Load(path=path, columns=tuple(zip(headers, labels))),)


def load_statements(state: PivotState) -> tuple[Load, ...]:
    """One Load per input, in sorted input order, tagging rows with their pivot labels."""
    return reduce(
        lambda acc, item: _fold_load(acc, item, state.headers),
        zip(state.files, state.labels),
        (),
    )


def _text(size: float) -> Call:
    return call("element_text", size=size)


class ScriptEngine:
    """
    Builds one R program for one destination.

    Attributes:
        destination (Destination): Output path and report parameters.
        settings (RuntimeSettings): Interpreter, SDK path and product label.
        pivots (PivotState): Classified pivots for the inputs.
        doc (ScriptDocument): Program under construction.

    Raises:
        PivotError: If the input list is empty.
        ScriptWriteError: If ``<basename>.R`` cannot be opened for writing.

    Examples:
        >>> engine = ScriptEngine(files, Destination("out/report.pdf"))  # doctest: +SKIP
        >>> engine.qplot("line", "DET", False, resolve_options("detOptions"))  # doctest: +SKIP
        >>> engine.finalize()  # doctest: +SKIP
        True
    """

    def __init__(
        self,
        files: Iterable[str | os.PathLike[str]],
        destination: Destination,
        settings: RuntimeSettings | None = None,
        *,
        runner: Runner | None = None,
        opener: Opener | None = None,
    ) -> None:
        self.destination = destination
        self.settings = settings or RuntimeSettings()
        self._runner = runner
        self._opener = opener
        self.pivots = classify_pivots(
            files,
            smooth=destination.smooth,
            confidence=destination.confidence,
            ncol=destination.ncol,
        )
        logger.debug(
            "Pivots: major=%s(%d%s) minor=%s(%d%s) ncol=%d flip=%s",
            self.pivots.major.header,
            self.pivots.major.size,
            ", smoothed" if self.pivots.major.smooth else "",
            self.pivots.minor.header,
            self.pivots.minor.size,
            ", smoothed" if self.pivots.minor.smooth else "",
            self.pivots.ncol,
            self.pivots.flip,
        )
        self.doc = ScriptDocument.open(destination.basename, destination.suffix, self.pivots)
        self._preamble()

    # ------------------------------------------------------------------
    # Shared preamble
    # ------------------------------------------------------------------

    @property
    def suffix(self) -> str:
        return self.doc.suffix

    @property
    def basename(self) -> str:
        return self.doc.basename

    def emit(self, *stmts: Statement) -> None:
        self.doc.extend(stmts)

    def _preamble(self) -> None:
        utils = os.path.join(self.settings.sdk_path, PLOT_UTILS_RELPATH)
        self.emit(Source(utils), Blank(), Comment("Read CSVs"), Assign("data", "NULL"))
        self.emit(*load_statements(self.pivots))
        device = device_for_suffix(self.suffix)
        name = device.value if device is not None else self.suffix
        # Only the pdf device measures its canvas in inches.
        raster = device is not Device.PDF
        self.emit(
            Blank(),
            Comment("Open output device"),
            OpenDevice(
                name,
                f"{self.basename}.{self.suffix}",
                width=CANVAS_WIDTH if raster else None,
                height=CANVAS_HEIGHT if raster else None,
            ),
            Blank(),
            Comment("Write figures"),
        )

    # ------------------------------------------------------------------
    # Chart declarations
    # ------------------------------------------------------------------

    def qplot(self, geom: str, data: str, flip_y: bool, opts: ChartOptions) -> Chart:
        """
        Append one layered curve chart.

        Args:
            geom: ggplot geometry (``"line"``, ``"point"``).
            data: Source relation name.
            flip_y: Plot ``1-Y`` (ROC drawn from a DET relation).
            opts: Resolved chart options.

        Returns:
            Chart: The appended declaration.
        """
        p = self.pivots
        base: list[tuple[str | None, object]] = [
            (None, "X"),
            (None, "1-Y" if flip_y else "Y"),
            ("data", data),
            ("geom", Str(geom)),
            ("main", Str(opts.title)),
        ]
        if opts.size is not None:
            base.append(("size", f"I({opts.size})"))
        if p.major.multi:
            base.append(("colour", f"factor({p.major.header})"))
        if p.minor.multi:
            base.append(("linetype", f"factor({p.minor.header})"))
        base.extend([("xlab", Str(opts.x_title)), ("ylab", Str(opts.y_title))])

        layers: list = [Call("qplot", tuple(base)), "theme_minimal()"]
        if p.error_bars and data != Relation.CMC.value:
            bounds = {"ymin": "(1-lower)", "ymax": "(1-upper)"} if flip_y else {"ymin": "lower", "ymax": "upper"}
            layers.append(
                Call(
                    "geom_errorbar",
                    (
                        ("data", f"{data}[seq(1, NROW({data}), by = {ERRORBAR_STRIDE}),]"),
                        (None, call("aes", x="X", **bounds)),
                        ("width", 0.1),
                        ("alpha", "I(1/2)"),
                    ),
                )
            )
        if p.major.multi:
            layers.append(get_scale("colour", p.major.header, p.major.size))
        if p.minor.multi:
            layers.append(call("scale_linetype_discrete", Str(p.minor.header)))
        layers.extend(self._axis("x", opts.x_log, opts.x_labels, opts.x_breaks))
        layers.extend(self._axis("y", opts.y_log, opts.y_labels, opts.y_breaks))
        if opts.x_limits is not None:
            layers.append(call("xlim", *opts.x_limits))
        if opts.y_limits is not None:
            layers.append(call("ylim", *opts.y_limits))
        layers.append(self._theme(opts))
        layers.append(call("guides", col=call("guide_legend", ncol=p.ncol)))

        chart = Chart(Chain(tuple(layers)))
        self.emit(chart)
        return chart

    @staticmethod
    def _axis(axis: str, log: bool, labels: str | None, breaks: str | None) -> list[Call]:
        if log:
            return [
                call(
                    f"scale_{axis}_log10",
                    labels=labels or 'trans_format("log10", math_format())',
                    breaks=breaks or "waiver()",
                ),
                call("annotation_logticks", sides=Str("b" if axis == "x" else "l")),
            ]
        return [
            call(
                f"scale_{axis}_continuous",
                labels=labels or "percent",
                breaks=breaks or "pretty_breaks(n=10)",
            )
        ]

    @staticmethod
    def _theme(opts: ChartOptions) -> Call:
        text = _text(opts.text_size)
        position = (
            Vector(tuple(opts.legend_position)) if opts.legend_position is not None else "'bottom'"
        )
        return call(
            "theme",
            **{
                "legend.title": text,
                "legend.text": text,
                "plot.title": text,
                "axis.text": text,
                "axis.title.x": text,
                "axis.title.y": text,
                "legend.position": position,
                "legend.background": "element_rect(fill = 'white')",
                "panel.grid.major": 'element_line(colour = "gray")',
                "panel.grid.minor": 'element_line(colour = "gray", linetype = "dashed")',
            },
        )

    def facet(self, *, flip: bool = False, scales: str = "free") -> list[Call]:
        """Facet layers over the multi-valued pivots (grid when both are, wrap when one is)."""
        p = self.pivots
        if not p.major.multi:
            return []
        if p.minor.multi:
            rows, cols = (p.minor.header, p.major.header) if flip else (p.major.header, p.minor.header)
            return [call("facet_grid", f"{rows} ~ {cols}", scales=Str(scales))]
        return [call("facet_wrap", f"~ {p.major.header}", scales=Str(scales))]

    # ------------------------------------------------------------------
    # Aggregation, tables, galleries
    # ------------------------------------------------------------------

    def pre_aggregate(self) -> list[Statement]:
        """Summarize curves over the smoothed pivot; no-op unless a pivot is smoothed."""
        p = self.pivots
        if not p.smoothed:
            return []
        group = p.group_header
        stmts: list[Statement] = [
            Summarize(rel.value, "Y", (group, "X"), p.confidence) for rel in SMOOTHED_RELATIONS
        ]
        stmts.append(Summarize(Relation.ERR.value, "X", ("Error", group, "Y"), p.confidence))
        stmts.append(Blank())
        self.emit(*stmts)
        return stmts

    def metadata_tables(self, *, csv: bool = False) -> list[Statement]:
        """Metadata summary, optional spacer page, and the four accuracy tables."""
        title = f"{self.settings.product_name} - {self.settings.product_version}"
        stmts: list[Statement] = [
            Blank(),
            Comment("Write metadata table"),
            Eval(call("plotMetadata", data="data", title=Str(title))),
        ]
        if not csv:
            stmts.append(Eval("plot.new()"))
        stmts.extend(Table(rel, name, labels) for rel, name, labels in METADATA_TABLES)
        stmts.append(Blank())
        self.emit(*stmts)
        return stmts

    def image_gallery(self, relation: str, score_label: str, comment: str) -> If:
        """
        Side-by-side image pairs for each row of ``relation`` (score, ``a:b:c:d`` paths, algorithm).

        Rows whose images are not JPEG, PNG or TIFF are skipped.
        """
        body: tuple[Statement, ...] = (
            Assign("score", f"{relation}[i,1]"),
            Assign("files", f"{relation}[i,2]"),
            Assign("alg", f"{relation}[i,3]"),
            Assign("files", 'unlist(strsplit(files, "[:]"))'),
            Blank(),
            Assign("ext1", 'unlist(strsplit(files[2], "[.]"))[2]'),
            Assign("ext2", 'unlist(strsplit(files[4], "[.]"))[2]'),
            read_image("img1", "ext1", "files[2]"),
            read_image("img2", "ext2", "files[4]"),
            Assign("name1", "files[1]"),
            Assign("name2", "files[3]"),
            Blank(),
            Assign("g1", call("rasterGrob", "img1", interpolate=True)),
            Assign("g2", call("rasterGrob", "img2", interpolate=True)),
            Blank(),
            Assign("plot1", _image_panel("g1", "alg", "files[2]", "name1")),
            Assign("plot2", _image_panel("g2", f'paste("{score_label} =", score)', "files[4]", "name2")),
            Blank(),
            Eval(call("multiplot", "plot1", "plot2", cols=2)),
        )
        gallery = If(
            f"nrow({relation}) != 0",
            (
                Library("jpeg"),
                Library("png"),
                Library("grid"),
                Comment(comment),
                For("i", f"1:nrow({relation})", body),
            ),
        )
        self.emit(gallery, Blank())
        return gallery

    # ------------------------------------------------------------------
    # Finalizer
    # ------------------------------------------------------------------

    def finalize(self, show: bool = False, *, execute: bool = True) -> bool:
        """
        Close the device, write the program, and run it.

        Args:
            show: Open the rendered artifact when the run succeeds.
            execute: If False, only write the program (reported as success).

        Returns:
            bool: True if the interpreter succeeded (or was not requested).
        """
        self.emit(CloseDevice())
        script = self.doc.seal()
        if not execute:
            return True
        ok = (self._runner or run_rscript)(script, self.settings)
        if ok and show:
            (self._opener or show_file)(self.doc.artifact_path, self.settings)
        logger.info("Rendering %s %s", self.doc.artifact_path, "succeeded" if ok else "failed")
        return ok


def read_image(target: str, ext: str, path: str) -> If:
    """Dispatch image decoding on ``ext``; unsupported extensions skip the row."""
    chain: tuple[Statement, ...] = (Next(),)
    for reader, extensions in reversed(IMAGE_READERS):
        condition = " || ".join(f'{ext} == "{e}"' for e in extensions)
        chain = (If(condition, (Assign(target, f"{reader}({path})"),), chain),)
    return chain[0]  # type: ignore[return-value]


def _basename_expr(path: str) -> str:
    parts = f'unlist(strsplit({path}, "[/]"))'
    return f"{parts}[length({parts})]"


def _image_panel(grob: str, title: str, path: str, label: str) -> Chain:
    return Chain(
        (
            call("qplot", "1:10", "1:10", geom=Str("blank")),
            call("annotation_custom", grob, xmin="-Inf", xmax="Inf", ymin="-Inf", ymax="Inf"),
            call(
                "theme",
                **{
                    "axis.line": "element_blank()",
                    "axis.text.x": "element_blank()",
                    "axis.text.y": "element_blank()",
                    "axis.ticks": "element_blank()",
                    "panel.background": "element_blank()",
                },
            ),
            call("labs", title=title),
            call("ylab", _basename_expr(path)),
            call("xlab", label),
        )
    )

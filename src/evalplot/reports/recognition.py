"""
Recognition report.

Charts, in page order
- metadata summary and accuracy tables (unless ``metadata`` is off)
- ROC (DET drawn as 1-Y), DET, IET, CMC curves
- score distribution histogram (SD), split by ground truth
- bar/box summary of TAR at fixed FARs (BC)
- error rate against score (ERR)
- impostor (IM) and genuine (GM) image-pair galleries
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from evalplot.core.grammar import Relation
from evalplot.core.options import RECOGNITION_DEFAULTS, ChartOptions, resolve_options
from evalplot.core.pivots import PivotState
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.script.engine import ScriptEngine, get_scale
from evalplot.script.ir import Assign, Blank, Call, Chain, Chart, Eval, Str, Vector, call

__all__ = ["plot", "resolve_recognition_options"]

logger = logging.getLogger(__name__)

# (option set, relation, flip_y), in page order.
CURVES: tuple[tuple[str, Relation, bool], ...] = (
    ("rocOptions", Relation.DET, True),
    ("detOptions", Relation.DET, False),
    ("ietOptions", Relation.IET, False),
    ("cmcOptions", Relation.CMC, False),
)


def resolve_recognition_options(destination: Destination) -> dict[str, ChartOptions]:
    return {
        name: resolve_options(name, destination.overrides(name), defaults=RECOGNITION_DEFAULTS)
        for name in RECOGNITION_DEFAULTS
    }


def _algs(p: PivotState) -> str:
    if p.major.multi and p.minor.multi and not p.smoothed:
        return f'paste(TF${p.major.header}, TF${p.minor.header}, sep="_")'
    return f"TF${p.group_header}"


def score_histogram(engine: ScriptEngine) -> Chain:
    layers: list = [
        call(
            "qplot",
            "X",
            data=Relation.SD.value,
            geom=Str("histogram"),
            fill="Y",
            position=Str("identity"),
            alpha="I(1/2)",
            xlab=Str("Score"),
            ylab=Str("Frequency"),
        ),
        call("scale_fill_manual", Str("Ground Truth"), values=Vector((Str("blue"), Str("red")))),
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
    layers.extend(engine.facet(flip=engine.pivots.flip))
    layers.append(call("theme", **{"aspect.ratio": 1}))
    return Chain(tuple(layers))


def accuracy_bars(p: PivotState) -> Chain:
    """TAR at the fixed FAR points; boxes over the smoothed dimension, dodged bars otherwise."""
    if p.major.smooth:
        x = f"factor({p.minor.header or 'Algorithm'})"
    else:
        x = f"factor({p.major.header})"
    args: list[tuple[str | None, object]] = [(None, x)]
    if p.smoothed:
        args.extend([(None, "Y"), ("data", Relation.BC.value), ("geom", Str("boxplot"))])
    else:
        args.extend(
            [("data", Relation.BC.value), ("geom", Str("bar")), ("position", Str("dodge")), ("weight", "Y")]
        )
    if p.major.multi:
        args.append(("fill", f"factor({p.major.header})"))
    args.extend([("xlab", Str("False Accept Rate")), ("ylab", Str("True Accept Rate"))])

    layers: list = [Call("qplot", tuple(args)), "theme_minimal()"]
    if p.major.multi:
        layers.append(get_scale("fill", p.major.header, p.major.size))
    if p.minor.multi:
        layers.append(call("facet_grid", f"{p.minor.header} ~ X"))
    else:
        layers.append(call("facet_grid", ". ~ X", labeller="far_labeller"))
    layers.append(call("scale_y_continuous", labels="percent"))
    layers.append(
        call(
            "theme",
            **{
                "legend.position": Str("none"),
                "axis.text.x": call("element_text", angle=-90, hjust=0),
            },
        )
    )
    if not p.smoothed:
        layers.append(
            Call("geom_text", (("data", Relation.BC.value), (None, call("aes", label="Y", y=0.05))))
        )
    return Chain(tuple(layers))


def error_rates(p: PivotState) -> Chain:
    """Error rate against score; the Algorithm dimension is faceted rather than coloured."""
    colour = p.major if p.flip else p.minor
    panel = p.minor if p.flip else p.major
    args: list[tuple[str | None, object]] = [
        (None, "X"),
        (None, "Y"),
        ("data", Relation.ERR.value),
        ("geom", Str("line")),
        ("linetype", "Error"),
    ]
    if colour.multi:
        args.append(("colour", f"factor({colour.header})"))
    args.extend([("xlab", Str("Score")), ("ylab", Str("Error Rate"))])

    layers: list = [Call("qplot", tuple(args)), "theme_minimal()"]
    if colour.multi:
        layers.append(get_scale("colour", colour.header, colour.size))
    layers.append(call("scale_y_log10", labels="percent"))
    layers.append(call("annotation_logticks", sides=Str("l")))
    if panel.multi:
        layers.append(call("facet_wrap", f"~ {panel.header}", scales=Str("free_x")))
    layers.append(call("theme", **{"aspect.ratio": 1}))
    return Chain(tuple(layers))


def plot(
    files: Iterable[str | os.PathLike[str]],
    destination: Destination | str | os.PathLike[str],
    show: bool = False,
    *,
    settings: RuntimeSettings | None = None,
    execute: bool = True,
) -> bool:
    """
    Build and run the recognition report.

    Args:
        files: Evaluation CSVs, named by the ``<Header>_<Header>/<label>_<label>.csv``
            convention.
        destination: Output path or Destination (suffix selects the format).
        show: Open the artifact after a successful run.
        settings: Runtime settings; loaded from env/TOML when None.
        execute: If False, only write ``<basename>.R``.

    Returns:
        bool: True if the program was written and (when requested) rendered successfully.

    Raises:
        PivotError: On an empty file list or a confidence outside [0, 100].
        OptionError: On invalid chart option overrides.
        ScriptWriteError: If the script cannot be written.
    """
    files = list(files)
    dest = Destination.coerce(destination)
    logger.debug("Plotting %d file(s) to %s", len(files), dest.path)
    opts = resolve_recognition_options(dest)

    engine = ScriptEngine(files, dest, settings or RuntimeSettings.load())
    p = engine.pivots
    engine.emit(
        Blank(),
        Eval("evalFormatting()"),
        Blank(),
        Assign("basename", Str(engine.basename)),
        Assign("errBars", p.error_bars),
        Assign("csv", dest.csv),
        Assign("algs", _algs(p)),
        Assign("algs", "algs[!duplicated(algs)]"),
    )
    engine.pre_aggregate()
    if dest.metadata:
        engine.metadata_tables(csv=dest.csv)

    for name, relation, flip_y in CURVES:
        engine.qplot("line", relation.value, flip_y, opts[name])

    engine.emit(
        Chart(score_histogram(engine)),
        Chart(accuracy_bars(p)),
        Chart(error_rates(p)),
    )
    engine.image_gallery(Relation.IM.value, "Impostor score", "Print impostor matches above the EER")
    engine.image_gallery(Relation.GM.value, "Genuine score", "Print genuine matches below the EER")
    return engine.finalize(show, execute=execute)

from __future__ import annotations

from pathlib import Path

import pytest

from evalplot.core.options import resolve_options
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.script.engine import ScriptEngine, get_scale
from evalplot.script.render import render_expr

SETTINGS = RuntimeSettings(sdk_path="/opt/openbr", product_name="OpenBR", product_version="1.1")

TWO_DIMS = [
    "Algorithm_Split/alg1_0.csv",
    "Algorithm_Split/alg2_0.csv",
    "Algorithm_Split/alg1_1.csv",
]
ONE_DIM = ["Algorithm/a.csv", "Algorithm/b.csv"]


def _engine(tmp_path: Path, files, name: str = "report.pdf", **dest) -> ScriptEngine:
    return ScriptEngine(files, Destination(str(tmp_path / name), **dest), SETTINGS)


@pytest.mark.parametrize(
    ("vals", "expected"),
    [
        (1, 'scale_colour_brewer("Algorithm", palette="Set1")'),
        (9, 'scale_colour_brewer("Algorithm", palette="Set1")'),
        (10, 'scale_colour_brewer("Algorithm", palette="Paired")'),
        (11, 'scale_colour_brewer("Algorithm", palette="Paired")'),
        (12, 'scale_colour_brewer("Algorithm", palette="Set3")'),
        (13, 'scale_colour_discrete("Algorithm")'),
    ],
)
def test_get_scale_boundaries(vals: int, expected: str) -> None:
    assert render_expr(get_scale("colour", "Algorithm", vals)) == expected


def test_get_scale_fill_mode() -> None:
    assert render_expr(get_scale("fill", "Split", 2)) == 'scale_fill_brewer("Split", palette="Set1")'


def test_preamble_loads_and_pdf_device(tmp_path: Path) -> None:
    e = _engine(tmp_path, TWO_DIMS)
    text = e.doc.text()
    base = str(tmp_path / "report")

    assert text.startswith('source("/opt/openbr/share/openbr/plotting/plot_utils.R")\n\n# Read CSVs\ndata <- NULL\n')
    # one load per input, sorted, each tagging both dimensions
    assert text.count("read.csv(") == 3
    assert text.count("tmp$Algorithm <- ") == 3
    assert text.count("tmp$Split <- ") == 3
    assert text.index('read.csv("Algorithm_Split/alg1_0.csv")') < text.index('read.csv("Algorithm_Split/alg1_1.csv")')
    assert f'pdf("{base}.pdf")\n' in text
    assert "# Open output device" in text
    assert text.rstrip().endswith("# Write figures")


def test_raster_device_gets_canvas(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM, name="report.jpg")
    assert f'jpeg("{tmp_path / "report"}.jpg", width=800, height=800)' in e.doc.text()


def test_qplot_encodings_for_two_dimensions(tmp_path: Path) -> None:
    e = _engine(tmp_path, TWO_DIMS)
    chart = render_expr(e.qplot("line", "DET", False, resolve_options("detOptions")).layers)

    assert chart.startswith(
        'qplot(X, Y, data=DET, geom="line", main="", colour=factor(Algorithm), '
        'linetype=factor(Split), xlab="False Accept Rate", ylab="False Reject Rate") + theme_minimal()'
    )
    assert 'scale_colour_brewer("Algorithm", palette="Set1")' in chart
    assert 'scale_linetype_discrete("Split")' in chart
    assert 'scale_x_log10(labels=trans_format("log10", math_format()), breaks=waiver()) + annotation_logticks(sides="b")' in chart
    assert 'scale_y_log10(labels=trans_format("log10", math_format()), breaks=waiver()) + annotation_logticks(sides="l")' in chart
    assert "legend.title=element_text(size=12)" in chart
    assert "legend.position='bottom'" in chart
    assert chart.endswith("guides(col=guide_legend(ncol=2))")
    assert "geom_errorbar" not in chart


def test_qplot_flip_and_options(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM)
    opts = resolve_options(
        "rocOptions",
        ["xLog=false", "xLimits=(0,1)", "legendPosition=(0.8,0.2)", "textSize=10", "size=2"],
    )
    chart = render_expr(e.qplot("line", "DET", True, opts).layers)

    assert chart.startswith('qplot(X, 1-Y, data=DET, geom="line", main="", size=I(2), colour=factor(Algorithm), xlab=')
    assert "linetype=" not in chart
    assert "scale_linetype_discrete" not in chart
    assert "scale_x_continuous(labels=percent, breaks=pretty_breaks(n=10))" in chart
    assert "xlim(0, 1)" in chart
    assert "ylim(" not in chart
    assert "legend.position=c(0.8, 0.2)" in chart
    assert "axis.text=element_text(size=10)" in chart


def test_single_label_dimension_gets_no_encodings(tmp_path: Path) -> None:
    e = _engine(tmp_path, ["Algorithm/only.csv"])
    chart = render_expr(e.qplot("line", "IET", False, resolve_options("ietOptions")).layers)
    assert "colour=" not in chart
    assert "scale_colour" not in chart
    assert "guides(col=guide_legend(ncol=1))" in chart


def test_error_bars_for_smoothed_curves(tmp_path: Path) -> None:
    e = _engine(tmp_path, TWO_DIMS, smooth="Split")
    det = render_expr(e.qplot("line", "DET", False, resolve_options("detOptions")).layers)
    roc = render_expr(e.qplot("line", "DET", True, resolve_options("rocOptions")).layers)
    cmc = render_expr(e.qplot("line", "CMC", False, resolve_options("cmcOptions")).layers)

    assert (
        "geom_errorbar(data=DET[seq(1, NROW(DET), by = 29),], aes(x=X, ymin=lower, ymax=upper), "
        "width=0.1, alpha=I(1/2))"
    ) in det
    assert "aes(x=X, ymin=(1-lower), ymax=(1-upper))" in roc
    assert "geom_errorbar" not in cmc
    # smoothed Split no longer drives line style
    assert "linetype=" not in det


def test_pre_aggregation_only_when_smoothed(tmp_path: Path) -> None:
    assert _engine(tmp_path, TWO_DIMS).pre_aggregate() == []

    e = _engine(tmp_path, TWO_DIMS, smooth="Split", confidence=90)
    e.pre_aggregate()
    text = e.doc.text()
    for rel in ("DET", "IET", "CMC", "TF", "FT", "CT"):
        assert f'{rel} <- summarySE({rel}, measurevar="Y", groupvars=c("Algorithm", "X"), conf.interval=0.9)' in text
    assert 'ERR <- summarySE(ERR, measurevar="X", groupvars=c("Error", "Algorithm", "Y"), conf.interval=0.9)' in text


def test_metadata_tables(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM)
    e.metadata_tables()
    text = e.doc.text()

    assert "# Write metadata table" in text
    assert 'plotMetadata(data=data, title="OpenBR - 1.1")' in text
    assert "plot.new()" in text
    assert 'plotTable(data=TF, name="Table of True Accept Rates at various False Accept Rates", labels=c("FAR = 1e-06"' in text
    assert 'plotTable(data=FT, name="Table of False Accept Rates at various True Accept Rates"' in text
    assert 'labels=c("Rank 1", "Rank 5", "Rank 10", "Rank 20", "Rank 50", "Rank 100")' in text
    assert 'plotTable(data=TS, name="Template Size by Algorithm", labels=c("Template Size (bytes):"))' in text


def test_metadata_tables_csv_skips_spacer_page(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM)
    e.metadata_tables(csv=True)
    assert "plot.new()" not in e.doc.text()


def test_facets(tmp_path: Path) -> None:
    two = _engine(tmp_path, TWO_DIMS)
    assert [render_expr(c) for c in two.facet()] == ['facet_grid(Algorithm ~ Split, scales="free")']
    assert [render_expr(c) for c in two.facet(flip=True)] == ['facet_grid(Split ~ Algorithm, scales="free")']
    one = _engine(tmp_path, ONE_DIM)
    assert [render_expr(c) for c in one.facet()] == ['facet_wrap(~ Algorithm, scales="free")']
    assert _engine(tmp_path, ["Algorithm/only.csv"]).facet() == []


def test_image_gallery_guard_and_dispatch(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM)
    e.image_gallery("IM", "Impostor score", "Print impostor matches above the EER")
    text = e.doc.text()

    assert "if (nrow(IM) != 0) {\n\tlibrary(jpeg)\n\tlibrary(png)\n\tlibrary(grid)\n" in text
    assert "\tfor (i in 1:nrow(IM)) {\n\t\tscore <- IM[i,1]\n" in text
    assert '\t\tif (ext1 == "jpg" || ext1 == "JPEG" || ext1 == "jpeg" || ext1 == "JPG") {\n\t\t\timg1 <- readJPEG(files[2])\n' in text
    assert '\t\t} else if (ext2 == "TIFF" || ext2 == "tiff" || ext2 == "TIF" || ext2 == "tif") {\n\t\t\timg2 <- readTIFF(files[4])\n' in text
    assert "\t\t} else {\n\t\t\tnext\n\t\t}" in text
    assert 'labs(title=paste("Impostor score =", score))' in text
    assert "multiplot(plot1, plot2, cols=2)" in text


def test_finalize_pdf_runs_and_shows(tmp_path: Path) -> None:
    ran, shown = [], []

    def runner(script, settings):
        ran.append(script)
        return True

    e = ScriptEngine(
        ONE_DIM,
        Destination(str(tmp_path / "report.pdf")),
        SETTINGS,
        runner=runner,
        opener=lambda path, settings: shown.append(path),
    )
    assert e.finalize(show=True) is True

    script = tmp_path / "report.R"
    assert ran == [str(script)]
    assert shown == [str(tmp_path / "report.pdf")]
    text = script.read_text()
    assert text.rstrip().endswith("dev.off()")
    assert "unlink(" not in text


def test_finalize_raster_removes_nothing(tmp_path: Path) -> None:
    # a stale pdf render of the same report must survive a png render
    (tmp_path / "report.pdf").write_text("earlier render")
    e = ScriptEngine(
        ONE_DIM, Destination(str(tmp_path / "report.png")), SETTINGS, runner=lambda s, st: True
    )
    e.finalize()
    text = (tmp_path / "report.R").read_text()

    assert f'png("{tmp_path / "report"}.png", width=800, height=800)' in text
    assert text.rstrip().endswith("dev.off()")
    assert "unlink(" not in text
    assert (tmp_path / "report.pdf").read_text() == "earlier render"


def test_uppercase_pdf_suffix_is_a_page_document(tmp_path: Path) -> None:
    e = _engine(tmp_path, ONE_DIM, name="report.PDF")
    e.finalize(execute=False)
    text = (tmp_path / "report.R").read_text()

    assert f'pdf("{tmp_path / "report"}.PDF")\n' in text
    assert "width=800" not in text
    assert "unlink(" not in text


@pytest.mark.parametrize(("name", "device"), [("report.PNG", "png"), ("report.JPG", "jpeg")])
def test_uppercase_raster_suffix_keeps_pixel_canvas(tmp_path: Path, name: str, device: str) -> None:
    text = _engine(tmp_path, ONE_DIM, name=name).doc.text()
    assert f'{device}("{tmp_path / name}", width=800, height=800)' in text


def test_finalize_failure_keeps_script_and_skips_show(tmp_path: Path) -> None:
    shown = []
    e = ScriptEngine(
        ONE_DIM,
        Destination(str(tmp_path / "report.pdf")),
        SETTINGS,
        runner=lambda s, st: False,
        opener=lambda path, settings: shown.append(path),
    )
    assert e.finalize(show=True) is False
    assert shown == []
    assert (tmp_path / "report.R").exists()


def test_finalize_without_execution(tmp_path: Path) -> None:
    def runner(script, settings):
        raise AssertionError("interpreter must not run")

    e = ScriptEngine(ONE_DIM, Destination(str(tmp_path / "r.pdf")), SETTINGS, runner=runner)
    assert e.finalize(execute=False) is True
    assert (tmp_path / "r.R").read_text().rstrip().endswith("dev.off()")

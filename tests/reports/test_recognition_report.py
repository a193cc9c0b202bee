from __future__ import annotations

from pathlib import Path

import pytest

from evalplot.core.errors import OptionArityError, OptionError, PivotError
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.reports import plot
from evalplot.script import engine as engine_mod

SETTINGS = RuntimeSettings(sdk_path="/opt/openbr", product_name="OpenBR", product_version="1.1")


def _touch(root: Path, rel: str) -> str:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("Plot,X,Y\n")
    return str(p)


@pytest.fixture
def scenario_a(tmp_path: Path) -> list[str]:
    return [
        _touch(tmp_path, "Algorithm_Split/alg1_0.csv"),
        _touch(tmp_path, "Algorithm_Split/alg2_0.csv"),
        _touch(tmp_path, "Algorithm_Split/alg1_1.csv"),
    ]


def _script(tmp_path: Path, name: str = "report") -> str:
    return (tmp_path / "out" / f"{name}.R").read_text()


@pytest.fixture
def out(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d


def test_scenario_a_loads_tag_both_dimensions(scenario_a, out: Path, tmp_path: Path) -> None:
    assert plot(scenario_a, str(out / "report.pdf"), settings=SETTINGS, execute=False) is True
    text = _script(tmp_path)

    loads = text.split("data <- rbind(data, tmp)")[:-1]
    assert len(loads) == 3
    for block in loads:
        assert "tmp$Algorithm <- " in block
        assert "tmp$Split <- " in block
    assert "colour=factor(Algorithm)" in text
    assert "linetype=factor(Split)" in text


def test_recognition_page_order(scenario_a, out: Path, tmp_path: Path) -> None:
    plot(scenario_a, str(out / "report.pdf"), settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    markers = [
        "evalFormatting()",
        f'basename <- "{out / "report"}"',
        "errBars <- FALSE",
        "csv <- FALSE",
        'algs <- paste(TF$Algorithm, TF$Split, sep="_")',
        "algs <- algs[!duplicated(algs)]",
        "# Write metadata table",
        'qplot(X, 1-Y, data=DET, geom="line"',
        'qplot(X, Y, data=DET, geom="line"',
        'qplot(X, Y, data=IET, geom="line"',
        'qplot(X, Y, data=CMC, geom="line", main="", size=I(1)',
        'qplot(X, data=SD, geom="histogram"',
        "data=BC",
        'qplot(X, Y, data=ERR, geom="line", linetype=Error',
        "if (nrow(IM) != 0) {",
        "if (nrow(GM) != 0) {",
        "dev.off()",
    ]
    positions = [text.index(m) for m in markers]
    assert positions == sorted(positions)


def test_recognition_option_overrides_flow_into_charts(scenario_a, out: Path, tmp_path: Path) -> None:
    dest = Destination(
        str(out / "report.pdf"),
        metadata=False,
        options={"detOptions": ("title=Verification", "yLog=false")},
    )
    plot(scenario_a, dest, settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    assert 'qplot(X, Y, data=DET, geom="line", main="Verification"' in text
    assert "plotMetadata" not in text


def test_recognition_accuracy_and_error_charts(scenario_a, out: Path, tmp_path: Path) -> None:
    plot(scenario_a, str(out / "report.pdf"), settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    assert (
        'qplot(factor(Algorithm), data=BC, geom="bar", position="dodge", weight=Y, '
        'fill=factor(Algorithm), xlab="False Accept Rate", ylab="True Accept Rate")'
    ) in text
    assert "facet_grid(Split ~ X)" in text
    assert "geom_text(data=BC, aes(label=Y, y=0.05))" in text
    assert "facet_grid(Algorithm ~ Split, scales=\"free\")" in text
    assert 'facet_wrap(~ Algorithm, scales="free_x")' in text


def test_scenario_b_fallback_has_no_encodings(tmp_path: Path, out: Path) -> None:
    files = [
        _touch(tmp_path, "Algorithm_Split/alg1_0.csv"),
        _touch(tmp_path, "Algorithm_Split/alg2.csv"),
        _touch(tmp_path, "Algorithm_Split/alg3_0.csv"),
    ]
    plot(files, str(out / "report.pdf"), settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    assert 'tmp$File <- "alg1_0"' in text
    assert 'tmp$File <- "alg2"' in text
    assert 'tmp$File <- "alg3_0"' in text
    assert "tmp$Algorithm" not in text
    assert "colour=factor(" not in text
    assert "linetype=factor(" not in text
    assert "scale_colour_brewer" not in text
    assert "facet_grid(. ~ X, labeller=far_labeller)" in text


def test_scenario_c_zero_confidence_keeps_aggregation_without_error_bars(tmp_path: Path, out: Path) -> None:
    files = [
        _touch(tmp_path, "Algorithm_Split/a_0.csv"),
        _touch(tmp_path, "Algorithm_Split/a_1.csv"),
        _touch(tmp_path, "Algorithm_Split/a_2.csv"),
        _touch(tmp_path, "Algorithm_Split/b_0.csv"),
    ]
    dest = Destination(str(out / "report.pdf"), smooth="Split", confidence=0)
    plot(files, dest, settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    assert 'DET <- summarySE(DET, measurevar="Y", groupvars=c("Algorithm", "X"), conf.interval=0)' in text
    assert "ERR <- summarySE(ERR" in text
    assert "geom_errorbar" not in text
    assert "errBars <- FALSE" in text
    # smoothed curves are boxed rather than dodged
    assert 'qplot(factor(Algorithm), Y, data=BC, geom="boxplot"' in text


def test_smoothed_with_confidence_draws_error_bars(scenario_a, out: Path, tmp_path: Path) -> None:
    plot(scenario_a, Destination(str(out / "report.pdf"), smooth="Split"), settings=SETTINGS, execute=False)
    text = _script(tmp_path)

    assert "errBars <- TRUE" in text
    assert "algs <- TF$Algorithm" in text
    assert "geom_errorbar(data=DET[seq(1, NROW(DET), by = 29),]" in text
    assert "geom_errorbar(data=CMC" not in text


def test_plot_runs_interpreter(monkeypatch, scenario_a, out: Path) -> None:
    ran = []
    monkeypatch.setattr(engine_mod, "run_rscript", lambda script, settings: ran.append(script) or True)

    assert plot(scenario_a, str(out / "report.png"), settings=SETTINGS) is True
    assert ran == [str(out / "report.R")]
    text = (out / "report.R").read_text()
    assert f'png("{out / "report"}.png", width=800, height=800)' in text
    assert text.rstrip().endswith("dev.off()")
    assert "unlink(" not in text


def test_plot_reports_interpreter_failure(monkeypatch, scenario_a, out: Path) -> None:
    monkeypatch.setattr(engine_mod, "run_rscript", lambda script, settings: False)
    assert plot(scenario_a, str(out / "report.pdf"), settings=SETTINGS) is False
    assert (out / "report.R").exists()


def test_fatal_inputs(out: Path, scenario_a) -> None:
    with pytest.raises(PivotError):
        plot([], str(out / "report.pdf"), settings=SETTINGS, execute=False)
    with pytest.raises(OptionArityError):
        plot(
            scenario_a,
            Destination(str(out / "report.pdf"), options={"rocOptions": ("xLog=a=b",)}),
            settings=SETTINGS,
            execute=False,
        )
    with pytest.raises(OptionError):
        plot(
            scenario_a,
            Destination(str(out / "report.pdf"), options={"cmcOptions": ("bogus=1",)}),
            settings=SETTINGS,
            execute=False,
        )

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable

from evalplot.core.errors import OptionError, PivotError
from evalplot.io.config import Destination, RuntimeSettings
from evalplot.io.errors import ConfigError, InputReadError, IoError
from evalplot.logging_utils import configure_logging, log_exception

from .detection import plot_detection
from .landmarking import plot_landmarking
from .metadata import plot_metadata
from .recognition import plot

logger = logging.getLogger("evalplot.cli")

# (flag, option set)
OPTION_FLAGS: tuple[tuple[str, str], ...] = (
    ("--roc-option", "rocOptions"),
    ("--det-option", "detOptions"),
    ("--iet-option", "ietOptions"),
    ("--cmc-option", "cmcOptions"),
    ("--pr-option", "prOptions"),
)

# Input or configuration problems; anything else the library raises is a runtime failure.
INPUT_ERRORS: tuple[type[BaseException], ...] = (PivotError, OptionError, ConfigError, InputReadError)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("files", nargs="+", help="Evaluation CSV files.")
    p.add_argument("--show", action="store_true", help="Open the artifact when rendering succeeds.")
    p.add_argument("--no-run", action="store_true", help="Write the R script only.")
    p.add_argument("--config", type=str, default=None, help="TOML file with a [runtime] table.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")


def _add_destination(p: argparse.ArgumentParser, option_flags: tuple[str, ...]) -> None:
    p.add_argument("--out", type=str, required=True, help="Output path; the suffix selects the format.")
    p.add_argument("--smooth", type=str, default=None, help="Pivot header to summarize with error bars.")
    p.add_argument("--confidence", type=float, default=None, help="Confidence interval in percent (default 95).")
    p.add_argument("--ncol", type=int, default=None, help="Legend column count.")
    p.add_argument(
        "--set",
        dest="entries",
        action="append",
        default=None,
        metavar="NAME[=VALUE]",
        help="Destination setting, e.g. metadata=false or a bare csv (repeatable).",
    )
    for flag, option_set in OPTION_FLAGS:
        if flag in option_flags:
            p.add_argument(
                flag,
                dest=option_set,
                action="append",
                default=None,
                metavar="NAME[=VALUE]",
                help=f"{option_set} override (repeatable).",
            )


def _destination(args: argparse.Namespace, *flags: str) -> Destination:
    """Fold the typed flags and ``--set`` entries into one Destination; later entries win."""
    entries = list(flags)
    if args.smooth is not None:
        entries.append(f"smooth={args.smooth}")
    if args.confidence is not None:
        entries.append(f"confidence={args.confidence}")
    if args.ncol is not None:
        entries.append(f"ncol={args.ncol}")
    entries.extend(args.entries or ())
    options = {
        option_set: tuple(getattr(args, option_set))
        for _, option_set in OPTION_FLAGS
        if getattr(args, option_set, None)
    }
    return Destination.from_entries(args.out, entries, options=options)


def _setup(args: argparse.Namespace) -> RuntimeSettings:
    configure_logging(args.verbose)
    return RuntimeSettings.load(args.config)


def _cmd_plot(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="evalplot plot", description="Recognition report (ROC, DET, IET, CMC).")
    _add_common(p)
    _add_destination(p, ("--roc-option", "--det-option", "--iet-option", "--cmc-option"))
    p.add_argument("--no-metadata", action="store_true", help="Skip the metadata summary and tables.")
    p.add_argument("--csv", action="store_true", help="CSV export requested (no spacer page).")
    args = p.parse_args(argv)

    settings = _setup(args)
    flags = [name for name, on in (("metadata=false", args.no_metadata), ("csv", args.csv)) if on]
    dest = _destination(args, *flags)
    ok = plot(args.files, dest, args.show, settings=settings, execute=not args.no_run)
    return 0 if ok else 1


def _cmd_plot_detection(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="evalplot plot-detection", description="Detection report (ROC, PR, overlap).")
    _add_common(p)
    _add_destination(p, ("--roc-option", "--pr-option"))
    args = p.parse_args(argv)

    settings = _setup(args)
    ok = plot_detection(args.files, _destination(args), args.show, settings=settings, execute=not args.no_run)
    return 0 if ok else 1


def _cmd_plot_landmarking(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="evalplot plot-landmarking", description="Landmarking error report.")
    _add_common(p)
    _add_destination(p, ())
    args = p.parse_args(argv)

    settings = _setup(args)
    ok = plot_landmarking(args.files, _destination(args), args.show, settings=settings, execute=not args.no_run)
    return 0 if ok else 1


def _cmd_plot_metadata(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="evalplot plot-metadata", description="Violin chart per metadata column.")
    _add_common(p)
    p.add_argument("--columns", type=str, required=True, help="';'-separated column names.")
    p.add_argument("--out", type=str, default="PlotMetadata", help="Output path (default PlotMetadata.pdf).")
    args = p.parse_args(argv)

    settings = _setup(args)
    ok = plot_metadata(
        args.files,
        args.columns,
        args.show,
        destination=args.out,
        settings=settings,
        execute=not args.no_run,
    )
    return 0 if ok else 1


COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "plot": _cmd_plot,
    "plot-detection": _cmd_plot_detection,
    "plot-landmarking": _cmd_plot_landmarking,
    "plot-metadata": _cmd_plot_metadata,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="evalplot", description="Generate and render R evaluation reports.")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in COMMANDS:
        sub.add_parser(name)
    return p


def run(argv: list[str]) -> int:
    """Dispatch one command; returns the process exit code."""
    if not argv:
        build_argparser().print_help()
        return 0
    cmd, rest = argv[0], argv[1:]
    handler = COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return 2
    try:
        return handler(rest)
    except INPUT_ERRORS as exc:
        log_exception(logger, exc)
        return 2
    except IoError as exc:
        log_exception(logger, exc)
        return 1


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    raise SystemExit(run(argv))


if __name__ == "__main__":
    main()

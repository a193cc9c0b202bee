"""
Configuration for the evalplot.io module.

Defines two frozen records:
- RuntimeSettings: how the generated program is executed (interpreter, SDK location,
  product label, opener). Loaded with precedence env > TOML > defaults.
- Destination: where one report goes and how it is parametrized (smoothing, confidence,
  legend columns, metadata tables, per-chart option overrides).

Import DAG discipline
- Depends only on stdlib and evalplot.core.
- Does not import higher layers (script, reports).

Notes
- TOML search order: ./evalplot.toml ([runtime] table or top-level keys), then
  ./pyproject.toml under [tool.evalplot.runtime].
- Destination entries use the same ``name=value`` / bare ``name`` grammar as chart
  overrides (evalplot.core.options.parse_assignment).
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

try:  # Python 3.11+ stdlib TOML parser
    import tomllib  # type: ignore
except Exception:  # pragma: no cover - environments without tomllib
    tomllib = None  # type: ignore[assignment]

from evalplot import __version__
from evalplot.core.constants import DEFAULT_CONFIDENCE, DEFAULT_SUFFIX
from evalplot.core.options import parse_assignment

from .errors import ConfigError

OPTION_SETS: tuple[str, ...] = ("rocOptions", "detOptions", "ietOptions", "cmcOptions", "prOptions")


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class RuntimeSettings:
    """
    Runtime settings for executing generated programs.

    Attributes:
        sdk_path (str): Installation prefix holding share/openbr/plotting/plot_utils.R.
        rscript (str): Interpreter executable invoked on the generated script.
        open_command (str | None): Command used to display a rendered artifact; None picks
            the platform default (open / xdg-open / startfile).
        product_name (str): Product label printed in the metadata table title.
        product_version (str): Version printed next to product_name.

    Examples:
        >>> from evalplot.io.config import RuntimeSettings
        >>> RuntimeSettings(sdk_path="/opt/openbr")  # doctest: +ELLIPSIS
        RuntimeSettings(...)
    """

    sdk_path: str = "/usr/local"
    rscript: str = "Rscript"
    open_command: str | None = None
    product_name: str = "evalplot"
    product_version: str = __version__

    @classmethod
    def _apply_mapping(cls, base: RuntimeSettings, cfg: dict[str, Any] | None) -> RuntimeSettings:
        """Apply a loose config mapping onto RuntimeSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base
        s = base
        for key in ("sdk_path", "rscript", "product_name", "product_version"):
            if key in cfg and isinstance(cfg[key], str) and cfg[key]:
                s = replace(s, **{key: cfg[key]})
        if "open_command" in cfg and isinstance(cfg["open_command"], str):
            s = replace(s, open_command=cfg["open_command"] or None)
        return s

    @classmethod
    def from_env(
        cls, base: RuntimeSettings | None = None, prefix: str = "EVALPLOT_"
    ) -> RuntimeSettings:
        """
        Build RuntimeSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - EVALPLOT_SDK_PATH
            - EVALPLOT_RSCRIPT
            - EVALPLOT_OPEN_COMMAND
            - EVALPLOT_PRODUCT_NAME
            - EVALPLOT_PRODUCT_VERSION
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("sdk_path", "rscript", "open_command", "product_name", "product_version"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> RuntimeSettings:
        """
        Build RuntimeSettings from a TOML file.

        Search order when `path` is None:
            1) ./evalplot.toml (with either a [runtime] table or direct keys)
            2) ./pyproject.toml under [tool.evalplot.runtime]

        Returns defaults if no file present or tomllib is unavailable.

        Raises:
            ConfigError: If an explicit ``path`` is given but cannot be parsed.
        """
        s = cls()
        if tomllib is None:
            return s

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "evalplot.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                if path is not None:
                    raise ConfigError(f"config file not found: {p}")
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                if path is not None:
                    raise ConfigError(f"failed to read config {p}: {exc}") from exc
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("evalplot", {}).get("runtime") if isinstance(tool, dict) else None
            elif isinstance(data.get("runtime"), dict):
                cfg = data["runtime"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> RuntimeSettings:
        """
        Load RuntimeSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search evalplot.toml, pyproject.toml.
        """
        s = cls.from_toml(path)
        return cls.from_env(base=s)


@dataclass(frozen=True)
class Destination:
    """
    Output location and report parameters.

    Attributes:
        path (str): Output artifact path; its extension selects the output format.
        smooth (str): Header of the dimension to summarize with confidence intervals.
        confidence (float): Confidence interval in percent, within [0, 100].
        ncol (int | None): Legend column count override.
        metadata (bool): Emit the metadata summary and accuracy tables.
        csv (bool): Raw CSV export requested (suppresses the blank spacer page).
        options (dict[str, tuple[str, ...]]): Override entries per option set
            (rocOptions, detOptions, ietOptions, cmcOptions, prOptions).

    Notes:
        ``basename`` keeps the directory of ``path``; ``suffix`` defaults to pdf.
    """

    path: str
    smooth: str = ""
    confidence: float = DEFAULT_CONFIDENCE
    ncol: int | None = None
    metadata: bool = True
    csv: bool = False
    options: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ConfigError(f"confidence must be within [0, 100], got {self.confidence!r}")
        if self.ncol is not None and self.ncol < 1:
            raise ConfigError(f"ncol must be >= 1, got {self.ncol!r}")
        unknown = sorted(set(self.options) - set(OPTION_SETS))
        if unknown:
            raise ConfigError(f"unknown option set(s) {unknown}; expected {list(OPTION_SETS)}")

    @property
    def basename(self) -> str:
        p = Path(self.path)
        return str(p.parent / p.stem)

    @property
    def suffix(self) -> str:
        return Path(self.path).suffix.lstrip(".") or DEFAULT_SUFFIX

    def overrides(self, option_set: str) -> tuple[str, ...]:
        return self.options.get(option_set, ())

    @classmethod
    def coerce(cls, value: Destination | str | os.PathLike[str]) -> Destination:
        """Accept a Destination or a bare output path (all report parameters defaulted)."""
        if isinstance(value, Destination):
            return value
        return cls(path=os.fspath(value))

    @classmethod
    def from_entries(
        cls,
        path: str | os.PathLike[str],
        entries: Iterable[str] = (),
        *,
        options: Mapping[str, Iterable[str]] | None = None,
    ) -> Destination:
        """
        Build a Destination from ``name=value`` / bare ``name`` entries.

        Args:
            path: Output artifact path.
            entries: Scalar settings, e.g. ``["smooth=Split", "confidence=90", "metadata"]``.
            options: Override entries per option set.

        Raises:
            ConfigError: On unknown names or values that do not convert.
            OptionArityError: On a malformed entry.
        """
        values: dict[str, Any] = {}
        for entry in entries:
            name, value = parse_assignment(entry)
            values[name] = value
        return cls.from_mapping(path, values, options=options)

    @classmethod
    def from_mapping(
        cls,
        path: str | os.PathLike[str],
        cfg: Mapping[str, Any],
        *,
        options: Mapping[str, Iterable[str]] | None = None,
    ) -> Destination:
        kwargs: dict[str, Any] = {"path": os.fspath(path)}
        for name, value in cfg.items():
            try:
                if name == "smooth":
                    kwargs["smooth"] = "" if value is True else str(value)
                elif name == "confidence":
                    kwargs["confidence"] = float(value)
                elif name == "ncol":
                    kwargs["ncol"] = int(value)
                elif name in ("metadata", "csv"):
                    kwargs[name] = _bool(value)
                elif name in OPTION_SETS:
                    raise ConfigError(f"option set {name!r} must be passed via options=")
                else:
                    raise ConfigError(f"unknown destination option {name!r}")
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"invalid value {value!r} for {name!r}") from exc
        if options:
            kwargs["options"] = {k: tuple(v) for k, v in options.items()}
        return cls(**kwargs)

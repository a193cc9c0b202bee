"""
Per-chart option resolution.

Each chart type starts from a fixed default option record; caller overrides given as
``name=value`` (or bare ``name`` for a flag) entries are applied in order, last write
wins, and the merged mapping is validated into a frozen ``ChartOptions`` model.

Style
- Zero-IO (stdlib + pydantic only).
- Option names on the wire are camelCase (``xLog``); model attributes are lower_snake.

Examples:
    >>> from evalplot.core.options import resolve_options
    >>> opts = resolve_options("rocOptions", ["xLog=false", "title=Verification"])
    >>> (opts.x_log, opts.title, opts.x_title)
    (False, 'Verification', 'False Accept Rate')
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_TEXT_SIZE
from .errors import OptionArityError, OptionError

__all__ = [
    "ChartOptions",
    "RECOGNITION_DEFAULTS",
    "DETECTION_DEFAULTS",
    "parse_assignment",
    "resolve_options",
]

Pair = tuple[float, float]

_PAIR_RE = re.compile(r"^\s*\(?\s*([^,;()]+?)\s*[,;]\s*([^,;()]+?)\s*\)?\s*$")


def parse_assignment(entry: str) -> tuple[str, Any]:
    """
    Split one ``name=value`` entry.

    Args:
        entry (str): ``"name=value"`` or a bare ``"name"``.

    Returns:
        tuple[str, Any]: ``(name, value)``; a bare name maps to ``True``.

    Raises:
        OptionArityError: If the entry does not split into one or two tokens, or the
            name is empty.

    Examples:
        >>> parse_assignment("xLog=true")
        ('xLog', 'true')
        >>> parse_assignment("metadata")
        ('metadata', True)
    """
    words = entry.split("=")
    if len(words) not in (1, 2) or not words[0].strip():
        raise OptionArityError(entry, len(words))
    name = words[0].strip()
    if len(words) == 1:
        return name, True
    return name, words[1].strip()


class ChartOptions(BaseModel):
    """
    Resolved options for one chart declaration.

    Attributes:
        title (str): Plot title (``main``).
        x_title (str): X axis label (wire name ``xTitle``).
        y_title (str): Y axis label (``yTitle``).
        x_log (bool): Logarithmic X scale (``xLog``).
        y_log (bool): Logarithmic Y scale (``yLog``).
        x_labels (str | None): R expression for X labels (``xLabels``).
        x_breaks (str | None): R expression for X breaks (``xBreaks``).
        y_labels (str | None): R expression for Y labels (``yLabels``).
        y_breaks (str | None): R expression for Y breaks (``yBreaks``).
        x_limits (tuple[float, float] | None): Explicit X limits (``xLimits``).
        y_limits (tuple[float, float] | None): Explicit Y limits (``yLimits``).
        size (str | None): Point/line size override (``size``).
        text_size (float): Legend, title and axis text size (``textSize``).
        legend_position (tuple[float, float] | None): Legend anchor in [0, 1]^2
            (``legendPosition``); None places the legend at the bottom.

    Notes:
        Pair-valued options accept ``"(a,b)"``, ``"a,b"`` or ``"a;b"`` strings.

    Raises:
        pydantic.ValidationError: On unknown names or values of the wrong type.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    title: str = ""
    x_title: str = Field("", alias="xTitle")
    y_title: str = Field("", alias="yTitle")
    x_log: bool = Field(False, alias="xLog")
    y_log: bool = Field(False, alias="yLog")
    x_labels: str | None = Field(None, alias="xLabels")
    x_breaks: str | None = Field(None, alias="xBreaks")
    y_labels: str | None = Field(None, alias="yLabels")
    y_breaks: str | None = Field(None, alias="yBreaks")
    x_limits: Pair | None = Field(None, alias="xLimits")
    y_limits: Pair | None = Field(None, alias="yLimits")
    size: str | None = None
    text_size: float = Field(DEFAULT_TEXT_SIZE, alias="textSize")
    legend_position: Pair | None = Field(None, alias="legendPosition")

    @field_validator("x_limits", "y_limits", "legend_position", mode="before")
    @classmethod
    def _parse_pair(cls, v: Any) -> Any:
        if isinstance(v, str):
            m = _PAIR_RE.match(v)
            if m is None:
                raise ValueError(f"expected a pair like (a,b), got {v!r}")
            return (m.group(1), m.group(2))
        return v

    @field_validator("size", "x_labels", "x_breaks", "y_labels", "y_breaks", mode="before")
    @classmethod
    def _numbers_as_text(cls, v: Any) -> Any:
        # R expressions; accept numbers from TOML/JSON callers.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


# Literal defaults per chart type (wire names).
RECOGNITION_DEFAULTS: dict[str, dict[str, Any]] = {
    "rocOptions": {
        "xTitle": "False Accept Rate",
        "yTitle": "True Accept Rate",
        "xLog": True,
        "yLog": False,
    },
    "detOptions": {
        "xTitle": "False Accept Rate",
        "yTitle": "False Reject Rate",
        "xLog": True,
        "yLog": True,
    },
    "ietOptions": {
        "xTitle": "False Positive Identification Rate (FPIR)",
        "yTitle": "False Negative Identification Rate (FNIR)",
        "xLog": True,
        "yLog": True,
    },
    "cmcOptions": {
        "xTitle": "Rank",
        "yTitle": "Retrieval Rate",
        "xLog": True,
        "yLog": False,
        "size": "1",
        "xLabels": "c(1,5,10,50,100)",
        "xBreaks": "c(1,5,10,50,100)",
    },
}

DETECTION_DEFAULTS: dict[str, dict[str, Any]] = {
    "rocOptions": {
        "xTitle": "False Accepts Per Image",
        "yTitle": "True Accept Rate",
        "xLog": True,
        "yLog": False,
    },
    "prOptions": {
        "xTitle": "False Accept Rate",
        "yTitle": "False Reject Rate",
        "xLog": True,
        "yLog": True,
    },
}


def resolve_options(
    chart: str,
    overrides: Iterable[str] = (),
    *,
    defaults: Mapping[str, Mapping[str, Any]] = RECOGNITION_DEFAULTS,
    **fixed: Any,
) -> ChartOptions:
    """
    Merge the defaults of ``chart`` with caller overrides.

    Args:
        chart: Option set name, e.g. ``"rocOptions"``.
        overrides: ``name=value`` or bare ``name`` entries, applied in order.
        defaults: Default records keyed by option set name.
        **fixed: Values applied after the overrides (wire names), e.g. a report-imposed
            ``title``.

    Returns:
        ChartOptions: The validated, frozen option record.

    Raises:
        OptionError: If ``chart`` has no defaults, or the merged values do not validate.
        OptionArityError: If an override entry is malformed.
    """
    if chart not in defaults:
        raise OptionError(f"unknown option set {chart!r}; expected one of {sorted(defaults)}")
    merged: dict[str, Any] = dict(defaults[chart])
    for entry in overrides:
        name, value = parse_assignment(entry)
        merged[name] = value
    merged.update(fixed)
    try:
        return ChartOptions.model_validate(merged)
    except ValidationError as exc:
        bad = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise OptionError(f"invalid {chart} option(s) {bad}: {exc}") from exc

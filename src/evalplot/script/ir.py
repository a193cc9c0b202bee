"""
Typed statement IR for generated R programs.

The synthesis engine builds programs from these nodes; evalplot.script.render turns them
into R source text. Nothing here knows about pivots or chart options.

Expressions
- ``str``: R code emitted verbatim (symbols, formulas, small expressions).
- ``Str``: a quoted string literal.
- ``bool`` / ``int`` / ``float``: R literals (TRUE/FALSE, numbers).
- ``Vector``: ``c(...)``.
- ``Call``: ``func(arg, name=value, ...)``.
- ``Chain``: layered ggplot expression ``a + b + c``.

Statements
- Data: Load, Assign, Subset, Summarize, Remove.
- Charts and tables: Chart, Table, Save.
- Control: If, For, Next, Function, Return.
- Program structure: Comment, Blank, Source, Library, Eval, OpenDevice, CloseDevice.

Examples:
    >>> from evalplot.script.ir import Call, Str, call
    >>> call("qplot", "X", "Y", data="DET", geom=Str("line"))
    Call(func='qplot', args=((None, 'X'), (None, 'Y'), ('data', 'DET'), ('geom', Str(value='line'))))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

__all__ = [
    "Expr",
    "Statement",
    "Str",
    "Vector",
    "Call",
    "Chain",
    "call",
    "Comment",
    "Blank",
    "Source",
    "Library",
    "Eval",
    "Assign",
    "Load",
    "Subset",
    "Summarize",
    "Remove",
    "Chart",
    "Table",
    "Save",
    "OpenDevice",
    "CloseDevice",
    "If",
    "For",
    "Next",
    "Function",
    "Return",
]


# ============================================================================
# Expressions
# ============================================================================


@dataclass(frozen=True, slots=True)
class Str:
    """Quoted R string literal."""

    value: str


@dataclass(frozen=True, slots=True)
class Vector:
    """``c(item, ...)``."""

    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class Call:
    """Function call; ``args`` holds ``(name, value)`` pairs, name None for positional."""

    func: str
    args: tuple[tuple[str | None, Expr], ...] = ()


@dataclass(frozen=True, slots=True)
class Chain:
    """ggplot layers joined with ``+``."""

    terms: tuple[Expr, ...]

    def __add__(self, other: Expr | Chain) -> Chain:
        if isinstance(other, Chain):
            return Chain(self.terms + other.terms)
        return Chain(self.terms + (other,))


Expr = Union[str, Str, bool, int, float, Vector, Call, Chain]


def call(func: str, *args: Expr, **kwargs: Expr) -> Call:
    """Build a Call. Dotted R argument names go through ``**{"legend.position": ...}``."""
    pairs: list[tuple[str | None, Expr]] = [(None, a) for a in args]
    pairs.extend(kwargs.items())
    return Call(func, tuple(pairs))


# ============================================================================
# Statements
# ============================================================================


@dataclass(frozen=True, slots=True)
class Comment:
    text: str


@dataclass(frozen=True, slots=True)
class Blank:
    pass


@dataclass(frozen=True, slots=True)
class Source:
    """Import an R library file by path."""

    path: str


@dataclass(frozen=True, slots=True)
class Library:
    name: str


@dataclass(frozen=True, slots=True)
class Eval:
    """Evaluate an expression for its side effect (prints, devices, helpers)."""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Assign:
    target: str
    value: Expr


@dataclass(frozen=True, slots=True)
class Load:
    """
    Read one CSV, tag it with its pivot labels, and append it to ``target``.

    Attributes:
        path (str): CSV path.
        columns (tuple[tuple[str, str], ...]): ``(header, label)`` pairs to set.
        target (str): Combined relation.
        scratch (str): Temporary relation name.
    """

    path: str
    columns: tuple[tuple[str, str], ...]
    target: str = "data"
    scratch: str = "tmp"


@dataclass(frozen=True, slots=True)
class Subset:
    """``target <- source[grep(label, source$column), -c(1)]``."""

    target: str
    label: str
    source: str = "data"
    column: str = "Plot"


@dataclass(frozen=True, slots=True)
class Summarize:
    """Mean and confidence interval of ``measure`` grouped by ``groupvars`` (in place)."""

    relation: str
    measure: str
    groupvars: tuple[str, ...]
    confidence: float | None = None
    target: str | None = None


@dataclass(frozen=True, slots=True)
class Remove:
    name: str


@dataclass(frozen=True, slots=True)
class Chart:
    """One chart declaration; rendered as a layered expression followed by a blank line."""

    layers: Chain


@dataclass(frozen=True, slots=True)
class Table:
    """Labelled cross-tab table drawn by plot_utils.R."""

    relation: str
    name: str
    labels: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Save:
    """Save the last chart to its own file."""

    path: str


@dataclass(frozen=True, slots=True)
class OpenDevice:
    device: str
    path: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class CloseDevice:
    pass


@dataclass(frozen=True, slots=True)
class If:
    """``if (condition) {body} else {orelse}``; a lone If in ``orelse`` renders as else-if."""

    condition: str
    body: tuple[Statement, ...]
    orelse: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class For:
    var: str
    iterable: str
    body: tuple[Statement, ...]


@dataclass(frozen=True, slots=True)
class Next:
    pass


@dataclass(frozen=True, slots=True)
class Function:
    name: str
    params: tuple[str, ...]
    body: tuple[Statement, ...]


@dataclass(frozen=True, slots=True)
class Return:
    value: Expr


Statement = Union[
    Comment,
    Blank,
    Source,
    Library,
    Eval,
    Assign,
    Load,
    Subset,
    Summarize,
    Remove,
    Chart,
    Table,
    Save,
    OpenDevice,
    CloseDevice,
    If,
    For,
    Next,
    Function,
    Return,
]

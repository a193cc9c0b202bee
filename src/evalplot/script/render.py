"""
Serialize IR statements to R source text.

This is the only module that knows R's concrete syntax. The engine builds nodes from
evalplot.script.ir; render() turns a statement sequence into program text.

Notes
- Blocks (if/for/function) indent with one tab per level.
- String literals escape backslashes and double quotes.
- Floats use the shortest ``%g`` form (0.95, 12, 1e-06).
"""

from __future__ import annotations

from collections.abc import Iterable

from .ir import (
    Assign,
    Blank,
    Call,
    Chain,
    Chart,
    CloseDevice,
    Comment,
    Eval,
    Expr,
    For,
    Function,
    If,
    Library,
    Load,
    Next,
    OpenDevice,
    Remove,
    Return,
    Save,
    Source,
    Statement,
    Str,
    Subset,
    Summarize,
    Table,
    Vector,
)

__all__ = [
    "quote",
    "render_expr",
    "render_statement",
    "render",
]


def quote(value: str) -> str:
    """Return ``value`` as an R string literal."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    return f"{value:g}"


def render_expr(expr: Expr) -> str:
    """Render one expression."""
    if isinstance(expr, bool):
        return "TRUE" if expr else "FALSE"
    if isinstance(expr, (int, float)):
        return _number(expr)
    if isinstance(expr, str):
        return expr
    if isinstance(expr, Str):
        return quote(expr.value)
    if isinstance(expr, Vector):
        return "c(" + ", ".join(render_expr(i) for i in expr.items) + ")"
    if isinstance(expr, Call):
        parts = []
        for name, value in expr.args:
            text = render_expr(value)
            parts.append(text if name is None else f"{name}={text}")
        return f"{expr.func}({', '.join(parts)})"
    if isinstance(expr, Chain):
        return " + ".join(render_expr(t) for t in expr.terms)
    raise TypeError(f"cannot render expression {expr!r}")


def _block(head: str, body: Iterable[Statement], depth: int) -> list[str]:
    pad = "\t" * depth
    lines = [f"{pad}{head} {{"]
    for stmt in body:
        lines.extend(render_statement(stmt, depth + 1))
    return lines


def _render_if(stmt: If, depth: int, head: str = "if") -> list[str]:
    pad = "\t" * depth
    lines = _block(f"{head} ({stmt.condition})", stmt.body, depth)
    if not stmt.orelse:
        lines.append(f"{pad}}}")
        return lines
    if len(stmt.orelse) == 1 and isinstance(stmt.orelse[0], If):
        return lines + _render_if(stmt.orelse[0], depth, head="} else if")
    lines.append(f"{pad}}} else {{")
    for inner in stmt.orelse:
        lines.extend(render_statement(inner, depth + 1))
    lines.append(f"{pad}}}")
    return lines


def render_statement(stmt: Statement, depth: int = 0) -> list[str]:
    """Render one statement to a list of lines (no trailing newlines)."""
    pad = "\t" * depth
    if isinstance(stmt, Comment):
        return [f"{pad}# {stmt.text}"]
    if isinstance(stmt, Blank):
        return [""]
    if isinstance(stmt, Source):
        return [f"{pad}source({quote(stmt.path)})"]
    if isinstance(stmt, Library):
        return [f"{pad}library({stmt.name})"]
    if isinstance(stmt, Eval):
        return [pad + render_expr(stmt.expr)]
    if isinstance(stmt, Assign):
        return [f"{pad}{stmt.target} <- {render_expr(stmt.value)}"]
    if isinstance(stmt, Load):
        lines = [f"{pad}{stmt.scratch} <- read.csv({quote(stmt.path)})"]
        lines.extend(
            f"{pad}{stmt.scratch}${header} <- {quote(label)}" for header, label in stmt.columns
        )
        lines.append(f"{pad}{stmt.target} <- rbind({stmt.target}, {stmt.scratch})")
        return lines
    if isinstance(stmt, Subset):
        return [
            f'{pad}{stmt.target} <- {stmt.source}[grep({quote(stmt.label)},'
            f"{stmt.source}${stmt.column}),-c(1)]"
        ]
    if isinstance(stmt, Summarize):
        args = [
            stmt.relation,
            f"measurevar={quote(stmt.measure)}",
            "groupvars=" + render_expr(Vector(tuple(Str(g) for g in stmt.groupvars))),
        ]
        if stmt.confidence is not None:
            args.append(f"conf.interval={_number(stmt.confidence)}")
        return [f"{pad}{stmt.target or stmt.relation} <- summarySE({', '.join(args)})"]
    if isinstance(stmt, Remove):
        return [f"{pad}rm({stmt.name})"]
    if isinstance(stmt, Chart):
        return [pad + render_expr(stmt.layers), ""]
    if isinstance(stmt, Table):
        labels = render_expr(Vector(tuple(Str(label) for label in stmt.labels)))
        return [f"{pad}plotTable(data={stmt.relation}, name={quote(stmt.name)}, labels={labels})"]
    if isinstance(stmt, Save):
        return [f"{pad}ggsave({quote(stmt.path)})"]
    if isinstance(stmt, OpenDevice):
        size = ""
        if stmt.width is not None and stmt.height is not None:
            size = f", width={stmt.width}, height={stmt.height}"
        return [f"{pad}{stmt.device}({quote(stmt.path)}{size})"]
    if isinstance(stmt, CloseDevice):
        return [f"{pad}dev.off()"]
    if isinstance(stmt, If):
        return _render_if(stmt, depth)
    if isinstance(stmt, For):
        return _block(f"for ({stmt.var} in {stmt.iterable})", stmt.body, depth) + [f"{pad}}}"]
    if isinstance(stmt, Next):
        return [f"{pad}next"]
    if isinstance(stmt, Function):
        head = f"{stmt.name} <- function({', '.join(stmt.params)})"
        return _block(head, stmt.body, depth) + [f"{pad}}}"]
    if isinstance(stmt, Return):
        return [f"{pad}return({render_expr(stmt.value)})"]
    raise TypeError(f"cannot render statement {stmt!r}")


def render(statements: Iterable[Statement]) -> str:
    """Render a program; the result ends with a newline."""
    lines: list[str] = []
    for stmt in statements:
        lines.extend(render_statement(stmt))
    return "\n".join(lines) + "\n"

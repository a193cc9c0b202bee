"""
evalplot.script — Program synthesis for the R graphics runtime.

## Responsibilities
- Model generated programs as typed statements (ir).
- Serialize statements to R source text (render).
- Hold one program per destination (document) and drive its construction and
  execution (engine).

## Public API
- ScriptEngine — preamble, chart declarations, aggregation, tables, galleries, finalize.
- ScriptDocument — append-only program sealed by the finalizer.
- render — statements to R text.
- get_scale — discrete colour/fill scale by cardinality.

## Import DAG discipline
- Depends on evalplot.core and evalplot.io.
- MUST NOT import evalplot.reports.
"""

from __future__ import annotations

from .document import ScriptDocument
from .engine import ScriptEngine, get_scale
from .render import render

__all__ = [
    "ScriptDocument",
    "ScriptEngine",
    "get_scale",
    "render",
]

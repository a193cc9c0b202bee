"""
Append-only program document.

A ScriptDocument owns the ordered statements of one generated program together with the
destination it renders to and the pivot state that parametrizes its statements.

Lifecycle
- open(): created at classification time; the script path is opened for writing
  immediately so an unwritable destination fails before any synthesis work.
- append()/extend(): every chart declaration adds statements; order is preserved.
- seal(): the finalizer renders and writes the program; further appends raise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from evalplot.core.constants import SCRIPT_SUFFIX
from evalplot.core.pivots import PivotState
from evalplot.io.errors import ScriptWriteError

from .ir import Statement
from .render import render

__all__ = ["ScriptDocument"]

logger = logging.getLogger(__name__)


@dataclass
class ScriptDocument:
    """
    Ordered statements of one generated R program.

    Attributes:
        basename (str): Destination path without suffix.
        suffix (str): Output format suffix (pdf, png, ...).
        pivots (PivotState): Classified pivots shared by every statement.
        statements (list[Statement]): Program body, append-only.
        sealed (bool): True once written by the finalizer.
    """

    basename: str
    suffix: str
    pivots: PivotState
    statements: list[Statement] = field(default_factory=list)
    sealed: bool = False

    @property
    def script_path(self) -> str:
        return f"{self.basename}.{SCRIPT_SUFFIX}"

    @property
    def artifact_path(self) -> str:
        return f"{self.basename}.{self.suffix}"

    @classmethod
    def open(cls, basename: str, suffix: str, pivots: PivotState) -> ScriptDocument:
        """
        Create a document and truncate its script file.

        Raises:
            ScriptWriteError: If ``<basename>.R`` cannot be opened for writing.
        """
        doc = cls(basename=basename, suffix=suffix, pivots=pivots)
        try:
            with open(doc.script_path, "w", encoding="utf-8"):
                pass
        except OSError as exc:
            raise ScriptWriteError(f"Failed to open {doc.script_path} for writing: {exc}") from exc
        return doc

    def append(self, stmt: Statement) -> None:
        if self.sealed:
            raise RuntimeError(f"{self.script_path} is sealed")
        self.statements.append(stmt)

    def extend(self, stmts: Iterable[Statement]) -> None:
        for stmt in stmts:
            self.append(stmt)

    def text(self) -> str:
        return render(self.statements)

    def seal(self) -> str:
        """
        Render and write the program, then refuse further statements.

        Returns:
            str: The script path.

        Raises:
            ScriptWriteError: If the script cannot be written.
        """
        text = self.text()
        try:
            with open(self.script_path, "w", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            raise ScriptWriteError(f"Failed to write {self.script_path}: {exc}") from exc
        self.sealed = True
        logger.info("Wrote %s (%d statements)", self.script_path, len(self.statements))
        return self.script_path

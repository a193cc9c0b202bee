"""
Pivot extraction and classification.

Recovers the categorical dimensions ("pivots") that distinguish a batch of result files
from their naming convention, then picks the two that drive visual encodings.

Naming convention
- The enclosing directory name lists the dimension headers: ``Algorithm_Split/``.
- Each file base name lists that file's labels in the same order: ``alg1_0.csv``.
- Headers and labels are split on ``_``.

Classification
- major: dimension with the most distinct labels (color/fill encoding).
- minor: dimension with the second most (line-style/facet encoding).
- Ties keep the first dimension in header order.
- A smoothed dimension collapses to a single value (absorbed into confidence intervals).

Notes:
    - Zero-IO: only paths are inspected, never file contents.
    - The first file whose label count differs from the header count degrades the whole
      batch to a single ``File`` dimension.

Examples:
    >>> from evalplot.core.pivots import classify_pivots
    >>> state = classify_pivots([
    ...     "Algorithm_Split/alg1_0.csv",
    ...     "Algorithm_Split/alg2_0.csv",
    ...     "Algorithm_Split/alg1_1.csv",
    ... ])
    >>> (state.major.header, state.major.size, state.minor.header, state.minor.size)
    ('Algorithm', 2, 'Split', 2)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from .constants import DEFAULT_CONFIDENCE, FALLBACK_HEADER, FLIP_HEADER, PIVOT_DELIMITER
from .errors import PivotError

__all__ = [
    "Pivot",
    "PivotState",
    "extract_pivots",
    "classify_pivots",
]

logger = logging.getLogger(__name__)


def extract_pivots(path: str | os.PathLike[str], *, headers: bool) -> list[str]:
    """
    Split a result path into pivot tokens.

    Args:
        path: Result file path.
        headers: If True, tokenize the enclosing directory name (the header list);
            otherwise tokenize the file base name with its last extension stripped.

    Returns:
        list[str]: Tokens in order. A name without delimiters yields one token.
    """
    p = Path(path)
    name = p.absolute().parent.name if headers else p.stem
    return name.split(PIVOT_DELIMITER)


@dataclass(frozen=True)
class Pivot:
    """
    One classified dimension.

    Attributes:
        index (int): Position in the header list, -1 when absent.
        header (str): Dimension name, "" when absent.
        size (int): Number of distinct labels used for layout (1 once smoothed).
        smooth (bool): Dimension is summarized statistically instead of drawn as a category.
    """

    index: int = -1
    header: str = ""
    size: int = 0
    smooth: bool = False

    @property
    def present(self) -> bool:
        return bool(self.header)

    @property
    def multi(self) -> bool:
        """True when the dimension gets a discrete visual encoding."""
        return self.size > 1


@dataclass(frozen=True)
class PivotState:
    """
    Result of classifying one batch of inputs.

    Attributes:
        files (tuple[str, ...]): Inputs in lexicographic order.
        headers (tuple[str, ...]): Dimension headers (``("File",)`` once degraded).
        labels (tuple[tuple[str, ...], ...]): Per-file labels aligned with ``headers``.
        label_sets (tuple[frozenset[str], ...]): Distinct labels per dimension.
        major (Pivot): Primary encoding dimension.
        minor (Pivot): Secondary encoding dimension.
        confidence (float): Confidence interval as a fraction in [0, 1].
        ncol (int): Legend column count.
        flip (bool): Minor pivot is the Algorithm dimension.
        convention_held (bool): False once the batch fell back to the ``File`` dimension.
    """

    files: tuple[str, ...]
    headers: tuple[str, ...]
    labels: tuple[tuple[str, ...], ...]
    label_sets: tuple[frozenset[str], ...]
    major: Pivot
    minor: Pivot
    confidence: float
    ncol: int
    flip: bool
    convention_held: bool = True

    @property
    def smoothed(self) -> bool:
        return self.major.smooth or self.minor.smooth

    @property
    def error_bars(self) -> bool:
        """Error bars are drawn only for smoothed curves with a non-zero confidence."""
        return self.smoothed and self.confidence != 0

    @property
    def group_header(self) -> str:
        """The active (non-collapsed) pivot used to group summaries."""
        if self.major.multi:
            return self.major.header
        if not self.minor.present:
            return self.major.header
        return self.minor.header


_Accumulated = tuple[tuple[str, ...], tuple[tuple[str, ...], ...], list[set[str]], bool]


def _accumulate(files: Sequence[str]) -> _Accumulated:
    headers = tuple(extract_pivots(files[0], headers=True))
    labels: list[tuple[str, ...]] = []
    items: list[set[str]] = [set() for _ in headers]
    held = True
    for name in files:
        if not held:
            labels.append((Path(name).stem,))
            continue
        pivots = extract_pivots(name, headers=False)
        if len(pivots) != len(headers):
            # Abandon the directory/filename labeling scheme for the whole batch.
            logger.warning(
                "Pivot count mismatch for %s (%d labels, %d headers); using %r dimension",
                name,
                len(pivots),
                len(headers),
                FALLBACK_HEADER,
            )
            held = False
            stem = Path(name).stem
            headers = (FALLBACK_HEADER,)
            items = [{stem}]
            labels = [(Path(f).stem,) for f in files[: len(labels) + 1]]
            continue
        labels.append(tuple(pivots))
        for i, label in enumerate(pivots):
            items[i].add(label)
    return headers, tuple(labels), items, held


def _select(headers: Sequence[str], items: Sequence[set[str]]) -> tuple[Pivot, Pivot]:
    major = Pivot()
    minor = Pivot()
    for i, values in enumerate(items):
        size = len(values)
        if size > major.size:
            minor = major
            major = Pivot(index=i, header=headers[i], size=size)
        elif size > minor.size:
            minor = Pivot(index=i, header=headers[i], size=size)
    return major, minor


def _apply_smooth(pivot: Pivot, smooth: str) -> Pivot:
    if smooth and pivot.header == smooth and pivot.size > 1:
        return replace(pivot, size=1, smooth=True)
    return pivot


def classify_pivots(
    files: Iterable[str | os.PathLike[str]],
    *,
    smooth: str | None = None,
    confidence: float = DEFAULT_CONFIDENCE,
    ncol: int | None = None,
) -> PivotState:
    """
    Infer the pivot dimensions of a batch of result files.

    Args:
        files: Result paths; order is irrelevant (inputs are sorted).
        smooth: Optional header of the dimension to summarize statistically.
        confidence: Confidence interval in percent, within [0, 100].
        ncol: Optional legend column count override.

    Returns:
        PivotState: Classified major/minor pivots and derived layout values.

    Raises:
        PivotError: If ``files`` is empty or ``confidence`` is outside [0, 100].
    """
    names = sorted(os.fspath(f) for f in files)
    if not names:
        raise PivotError("Empty file list.")
    if not 0 <= float(confidence) <= 100:
        raise PivotError(f"confidence must be within [0, 100], got {confidence!r}")

    headers, labels, items, held = _accumulate(names)
    major, minor = _select(headers, items)

    smooth = smooth or ""
    major = _apply_smooth(major, smooth)
    minor = _apply_smooth(minor, smooth)
    if major.size < minor.size:
        major, minor = minor, major

    if ncol is None:
        if major.size > 1:
            ncol = major.size
        else:
            ncol = major.size if not minor.present else minor.size

    return PivotState(
        files=tuple(names),
        headers=headers,
        labels=labels,
        label_sets=tuple(frozenset(s) for s in items),
        major=major,
        minor=minor,
        confidence=float(confidence) / 100.0,
        ncol=int(ncol),
        flip=minor.header == FLIP_HEADER,
        convention_held=held,
    )

"""
evalplot core defaults.

Fixed literals shared by the classifier, the option resolver and the script engine.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Relation names referenced here are produced by ``evalFormatting()`` in plot_utils.R.
    - Changing a palette threshold changes every generated report; keep tests in sync.
"""

from __future__ import annotations

__all__ = [
    "PIVOT_DELIMITER",
    "FALLBACK_HEADER",
    "FLIP_HEADER",
    "DEFAULT_CONFIDENCE",
    "DEFAULT_SUFFIX",
    "SCRIPT_SUFFIX",
    "CANVAS_WIDTH",
    "CANVAS_HEIGHT",
    "ERRORBAR_STRIDE",
    "DEFAULT_TEXT_SIZE",
    "PLOT_UTILS_RELPATH",
    "IMAGE_READERS",
    "METADATA_DESTINATION",
]

# Directory and file base names are split on this delimiter to recover pivots.
PIVOT_DELIMITER: str = "_"

# Single synthetic dimension used once the naming convention is abandoned.
FALLBACK_HEADER: str = "File"

# A minor pivot with this header flips facet orientation.
FLIP_HEADER: str = "Algorithm"

# Percent; stored on PivotState as a fraction.
DEFAULT_CONFIDENCE: float = 95.0

DEFAULT_SUFFIX: str = "pdf"
SCRIPT_SUFFIX: str = "R"

# Raster devices only; pdf keeps its own page size.
CANVAS_WIDTH: int = 800
CANVAS_HEIGHT: int = 800

# Every Nth row of a smoothed curve gets an error bar.
ERRORBAR_STRIDE: int = 29

DEFAULT_TEXT_SIZE: float = 12.0

PLOT_UTILS_RELPATH: str = "share/openbr/plotting/plot_utils.R"

# (R reader, accepted extensions). Anything else is skipped row by row.
IMAGE_READERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("readJPEG", ("jpg", "JPEG", "jpeg", "JPG")),
    ("readPNG", ("PNG", "png")),
    ("readTIFF", ("TIFF", "tiff", "TIF", "tif")),
)

METADATA_DESTINATION: str = "PlotMetadata"

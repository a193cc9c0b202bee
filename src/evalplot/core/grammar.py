"""
Canonical evalplot vocabulary.

Defines the relation names the generated program refers to and the
output devices. Zero-IO helpers normalize destination suffixes to devices.

Responsibilities
- Name every R relation once, so the engine and the report variants never spell them
  inline.
- Map a destination suffix to the R graphics device that writes it.

Relations
---------
| Relation         | Produced by                  | Meaning
|------------------|------------------------------|-----------------------------------------
| DET              | evalFormatting()             | FAR/FRR curve (ROC when drawn as 1-Y)
| IET              | evalFormatting()             | FPIR/FNIR identification error curve
| CMC              | evalFormatting()             | rank retrieval curve
| TF / FT / CT     | evalFormatting()             | TAR@FAR, FAR@TAR, retrieval@rank tables
| TS               | evalFormatting()             | template size
| ERR              | evalFormatting()             | error rate vs score
| SD               | evalFormatting()             | score distribution
| BC               | evalFormatting()             | bar chart summary
| IM / GM          | evalFormatting()             | impostor / genuine match pairs

Examples
--------
>>> from evalplot.core.grammar import device_for_suffix, Device
>>> device_for_suffix("jpg") is Device.JPEG
True
>>> device_for_suffix("PDF") is Device.PDF
True
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "Relation",
    "DetectionRelation",
    "LandmarkRelation",
    "Device",
    "SMOOTHED_RELATIONS",
    "device_for_suffix",
]


class Relation(Enum):
    """Relations built by plot_utils.R for a recognition report."""

    DATA = "data"
    DET = "DET"
    IET = "IET"
    CMC = "CMC"
    TF = "TF"
    FT = "FT"
    CT = "CT"
    TS = "TS"
    ERR = "ERR"
    SD = "SD"
    BC = "BC"
    IM = "IM"
    GM = "GM"


# Curves re-summarized over the smoothed pivot. ERR is handled separately (X measure).
SMOOTHED_RELATIONS: tuple[Relation, ...] = (
    Relation.DET,
    Relation.IET,
    Relation.CMC,
    Relation.TF,
    Relation.FT,
    Relation.CT,
)


class DetectionRelation(Enum):
    """Sub-relations split out of ``data`` by its ``Plot`` column in a detection report."""

    DISCRETE_ROC = "DiscreteROC"
    CONTINUOUS_ROC = "ContinuousROC"
    DISCRETE_PR = "DiscretePR"
    CONTINUOUS_PR = "ContinuousPR"
    OVERLAP = "Overlap"
    AVERAGE_OVERLAP = "AverageOverlap"


class LandmarkRelation(Enum):
    """Sub-relations split out of ``data`` by its ``Plot`` column in a landmarking report."""

    BOX = "Box"
    SAMPLE = "Sample"
    EXT = "EXT"
    EXP = "EXP"
    NORM_LENGTH = "NormLength"


class Device(Enum):
    """R graphics devices, keyed by the function that opens them."""

    PDF = "pdf"
    PNG = "png"
    JPEG = "jpeg"
    TIFF = "tiff"
    BMP = "bmp"
    SVG = "svg"


_SUFFIX_DEVICES: dict[str, Device] = {
    "pdf": Device.PDF,
    "png": Device.PNG,
    "jpg": Device.JPEG,
    "jpeg": Device.JPEG,
    "tif": Device.TIFF,
    "tiff": Device.TIFF,
    "bmp": Device.BMP,
    "svg": Device.SVG,
}


def device_for_suffix(suffix: str) -> Device | None:
    """Return the device for a destination suffix, or None when R has no matching device."""
    return _SUFFIX_DEVICES.get(suffix.strip().lower())

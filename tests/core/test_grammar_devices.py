from __future__ import annotations

import pytest

from evalplot.core.grammar import (
    SMOOTHED_RELATIONS,
    DetectionRelation,
    Device,
    LandmarkRelation,
    Relation,
    device_for_suffix,
)


@pytest.mark.parametrize(
    ("suffix", "device"),
    [
        ("pdf", Device.PDF),
        ("PNG", Device.PNG),
        ("jpg", Device.JPEG),
        ("jpeg", Device.JPEG),
        ("tif", Device.TIFF),
        ("tiff", Device.TIFF),
        ("bmp", Device.BMP),
        ("svg", Device.SVG),
    ],
)
def test_device_for_suffix(suffix: str, device: Device) -> None:
    assert device_for_suffix(suffix) is device


def test_unknown_suffix_has_no_device() -> None:
    assert device_for_suffix("xyz") is None


def test_relation_names_are_unique() -> None:
    for enum in (Relation, DetectionRelation, LandmarkRelation):
        values = [m.value for m in enum]
        assert len(values) == len(set(values))


def test_err_is_not_resummarized_with_curves() -> None:
    assert Relation.ERR not in SMOOTHED_RELATIONS
    assert [r.value for r in SMOOTHED_RELATIONS] == ["DET", "IET", "CMC", "TF", "FT", "CT"]

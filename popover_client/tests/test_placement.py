from __future__ import annotations

import pytest

from popover_client.errors import PopoverConfigError
from popover_client.placement import PLACEMENTS, PlacementError, compose_placement, parse_placement


def test_twelve_placements_with_perpendicular_suffixes() -> None:
    assert len(PLACEMENTS) == 12
    assert "topLeft" in PLACEMENTS and "rightBottom" in PLACEMENTS
    assert "topTop" not in PLACEMENTS and "leftRight" not in PLACEMENTS


def test_parse_placement_splits_base_and_suffix() -> None:
    assert parse_placement("top") == ("top", None)
    assert parse_placement("bottomRight") == ("bottom", "Right")
    assert parse_placement("leftTop") == ("left", "Top")
    assert compose_placement("right", "Bottom") == "rightBottom"
    assert compose_placement("left", None) == "left"


@pytest.mark.parametrize("label", ["middle", "topBottom", "leftLeft", "Top", "", "top-left"])
def test_parse_placement_rejects_unknown_labels(label: str) -> None:
    with pytest.raises(PlacementError):
        parse_placement(label)


def test_placement_error_is_config_error() -> None:
    with pytest.raises(PopoverConfigError):
        parse_placement(42)  # type: ignore[arg-type]

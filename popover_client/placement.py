"""Placement label vocabulary: base side plus an optional perpendicular bias."""
from __future__ import annotations

from typing import Optional, Tuple

from popover_client.errors import PopoverConfigError

VERTICAL_BASES = ("top", "bottom")
HORIZONTAL_BASES = ("left", "right")
BASES = VERTICAL_BASES + HORIZONTAL_BASES

_SUFFIXES_BY_BASE = {
    "top": ("Left", "Right"),
    "bottom": ("Left", "Right"),
    "left": ("Top", "Bottom"),
    "right": ("Top", "Bottom"),
}

OPPOSITE_BASE = {"top": "bottom", "bottom": "top", "left": "right", "right": "left"}
OPPOSITE_SUFFIX = {"Left": "Right", "Right": "Left", "Top": "Bottom", "Bottom": "Top"}

PLACEMENTS: Tuple[str, ...] = tuple(
    label
    for base in BASES
    for label in (base,) + tuple(f"{base}{suffix}" for suffix in _SUFFIXES_BY_BASE[base])
)


class PlacementError(PopoverConfigError):
    """Raised for a label outside the twelve supported placements."""


def parse_placement(label: str) -> Tuple[str, Optional[str]]:
    """Split ``label`` into ``(base, suffix)``; suffix is ``None`` for a bare side."""
    if not isinstance(label, str):
        raise PlacementError(f"placement must be a string, got {type(label).__name__}")
    for base in BASES:
        if not label.startswith(base):
            continue
        rest = label[len(base):]
        if not rest:
            return base, None
        if rest in _SUFFIXES_BY_BASE[base]:
            return base, rest
    raise PlacementError(f"unknown placement {label!r}; expected one of {', '.join(PLACEMENTS)}")


def compose_placement(base: str, suffix: Optional[str]) -> str:
    return f"{base}{suffix or ''}"


def is_vertical(base: str) -> bool:
    return base in VERTICAL_BASES


def validate_placement(label: str) -> str:
    parse_placement(label)
    return label

"""Collision avoidance: edge constraints, cross-axis bias and placement flips (pure)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from popover_client.geometry import ContentDimensions, Rect
from popover_client.placement import (
    OPPOSITE_BASE,
    OPPOSITE_SUFFIX,
    compose_placement,
    is_vertical,
    parse_placement,
)


@dataclass(frozen=True)
class EdgeConstraints:
    """Trigger edge positions beyond which content would leave the container."""

    top: float
    bottom: float
    left: float
    right: float


def compute_constraints(
    container: Rect,
    content: ContentDimensions,
    *,
    target_gap: float,
    container_gap: float,
) -> EdgeConstraints:
    inset = float(target_gap) + float(container_gap)
    return EdgeConstraints(
        top=container.top + content.height + inset,
        bottom=container.bottom - content.height - inset,
        left=container.left + content.width + inset,
        right=container.right - content.width - inset,
    )


def _base_overflows(base: str, trigger: Rect, limits: EdgeConstraints) -> bool:
    if base == "top":
        return trigger.top < limits.top
    if base == "bottom":
        return trigger.bottom > limits.bottom
    if base == "left":
        return trigger.left < limits.left
    return trigger.right > limits.right


def _suffix_overflows(suffix: str, trigger: Rect, limits: EdgeConstraints) -> bool:
    # An edge-aligned suffix grows away from the named edge.
    if suffix == "Left":
        return trigger.left > limits.right
    if suffix == "Right":
        return trigger.right < limits.left
    if suffix == "Top":
        return trigger.top > limits.bottom
    return trigger.bottom < limits.top


def cross_axis_bias(base: str, trigger: Rect, limits: EdgeConstraints) -> Optional[str]:
    """Pick at most one suffix for a bare base side pinned near a container edge."""
    if is_vertical(base):
        if trigger.right < limits.left:
            return "Left"
        if trigger.left > limits.right:
            return "Right"
        return None
    if trigger.bottom < limits.top:
        return "Top"
    if trigger.top > limits.bottom:
        return "Bottom"
    return None


def flip_primary(base: str, trigger: Rect, limits: EdgeConstraints) -> str:
    """Flip to the opposite side only when it fits and the current side does not."""
    if not _base_overflows(base, trigger, limits):
        return base
    opposite = OPPOSITE_BASE[base]
    if _base_overflows(opposite, trigger, limits):
        return base
    return opposite


def flip_cross(suffix: Optional[str], trigger: Rect, limits: EdgeConstraints) -> Optional[str]:
    if suffix is None or not _suffix_overflows(suffix, trigger, limits):
        return suffix
    opposite = OPPOSITE_SUFFIX[suffix]
    if _suffix_overflows(opposite, trigger, limits):
        return suffix
    return opposite


def choose_placement(requested: str, trigger: Rect, limits: EdgeConstraints) -> str:
    """Return the label content should use for ``requested`` inside ``limits``."""
    base, suffix = parse_placement(requested)
    if suffix is None:
        suffix = cross_axis_bias(base, trigger, limits)
    base = flip_primary(base, trigger, limits)
    suffix = flip_cross(suffix, trigger, limits)
    return compose_placement(base, suffix)

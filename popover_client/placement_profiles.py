"""Placement profiles: turn scroll-adjusted trigger geometry into concrete style offsets.

Each profile is a pure function ``(rect, params) -> StyleDescriptor`` keyed by a
placement label. The table shipped here is the default one; hosts may pass any
mapping that covers every label (see :func:`validate_profiles`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from popover_client.geometry import Rect
from popover_client.placement import PLACEMENTS, PlacementError, is_vertical, parse_placement


@dataclass(frozen=True)
class ProfileParams:
    offset: Tuple[float, float]
    with_arrow: bool
    arrow_size: float
    space_between_popover_and_target: float
    min_space_between_popover_and_container: float
    avoid_overflow_bounds: bool
    fit_max_height_to_bounds: bool
    fit_max_width_to_bounds: bool
    max_height: Optional[float]
    max_width: Optional[float]
    animation: bool
    opening_animation_translate_distance: float
    closing_animation_translate_distance: float
    content_width: float
    content_height: float
    container_width: float
    container_height: float
    scroll_top: float = 0.0
    scroll_left: float = 0.0
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StyleDescriptor:
    """Offsets relative to the offset origin plus enter/exit animation vectors."""

    style: Mapping[str, float]
    arrow_offset: Optional[float] = None
    initial: Mapping[str, float] = field(default_factory=dict)
    animate: Mapping[str, float] = field(default_factory=dict)
    exit: Mapping[str, float] = field(default_factory=dict)


PlacementProfile = Callable[[Rect, ProfileParams], StyleDescriptor]


def _clamp(value: float, low: float, high: float) -> float:
    if high < low:
        return low
    return max(low, min(high, value))


def _cross_start(leading: float, trailing: float, size: float, suffix: Optional[str]) -> float:
    if suffix in ("Left", "Top"):
        return leading
    if suffix in ("Right", "Bottom"):
        return trailing - size
    return leading + (trailing - leading) / 2.0 - size / 2.0


def _arrow_offset(center: float, start: float, size: float, arrow_size: float) -> float:
    if size < arrow_size * 2:
        return size / 2.0
    return _clamp(center - start, arrow_size, size - arrow_size)


def _animation_frames(base: str, params: ProfileParams) -> Tuple[Dict[str, float], Dict[str, float], Dict[str, float]]:
    if not params.animation:
        return {}, {}, {}
    axis = "y" if is_vertical(base) else "x"
    # Content starts nudged toward the trigger and travels away from it.
    sign = 1.0 if base in ("top", "left") else -1.0
    initial = {"opacity": 0.0, axis: sign * params.opening_animation_translate_distance}
    animate = {"opacity": 1.0, "x": 0.0, "y": 0.0}
    exit_frame = {"opacity": 0.0, axis: sign * params.closing_animation_translate_distance}
    return initial, animate, exit_frame


def _build_profile(label: str) -> PlacementProfile:
    base, suffix = parse_placement(label)

    def profile(rect: Rect, params: ProfileParams) -> StyleDescriptor:
        width = params.content_width
        height = params.content_height
        container_gap = params.min_space_between_popover_and_container
        gap = params.space_between_popover_and_target
        if params.with_arrow:
            gap += params.arrow_size / 2.0
        # Visible window of the origin, expressed in scroll-adjusted coordinates.
        view_top = params.scroll_top
        view_left = params.scroll_left
        view_bottom = view_top + params.container_height
        view_right = view_left + params.container_width

        style: Dict[str, float] = {}
        arrow: Optional[float] = None
        if is_vertical(base):
            top = rect.top - height - gap if base == "top" else rect.bottom + gap
            left = _cross_start(rect.left, rect.right, width, suffix)
            if params.avoid_overflow_bounds and params.container_width > 0:
                left = _clamp(left, view_left + container_gap, view_right - width - container_gap)
            if params.with_arrow:
                arrow = _arrow_offset(rect.left + rect.width / 2.0, left, width, params.arrow_size)
            if params.fit_max_height_to_bounds:
                room = rect.top - view_top if base == "top" else view_bottom - rect.bottom
                style["maxHeight"] = max(0.0, room - gap - container_gap)
            if params.fit_max_width_to_bounds:
                style["maxWidth"] = max(0.0, params.container_width - 2 * container_gap)
        else:
            left = rect.left - width - gap if base == "left" else rect.right + gap
            top = _cross_start(rect.top, rect.bottom, height, suffix)
            if params.avoid_overflow_bounds and params.container_height > 0:
                top = _clamp(top, view_top + container_gap, view_bottom - height - container_gap)
            if params.with_arrow:
                arrow = _arrow_offset(rect.top + rect.height / 2.0, top, height, params.arrow_size)
            if params.fit_max_width_to_bounds:
                room = rect.left - view_left if base == "left" else view_right - rect.right
                style["maxWidth"] = max(0.0, room - gap - container_gap)
            if params.fit_max_height_to_bounds:
                style["maxHeight"] = max(0.0, params.container_height - 2 * container_gap)

        if "maxHeight" not in style and params.max_height is not None:
            style["maxHeight"] = float(params.max_height)
        if "maxWidth" not in style and params.max_width is not None:
            style["maxWidth"] = float(params.max_width)
        offset_x, offset_y = params.offset
        style["top"] = top + offset_y
        style["left"] = left + offset_x
        initial, animate, exit_frame = _animation_frames(base, params)
        return StyleDescriptor(style=style, arrow_offset=arrow, initial=initial, animate=animate, exit=exit_frame)

    profile.__name__ = f"{label}_profile"
    return profile


DEFAULT_PROFILES: Mapping[str, PlacementProfile] = {label: _build_profile(label) for label in PLACEMENTS}


def validate_profiles(profiles: Mapping[str, PlacementProfile], required: Iterable[str] = PLACEMENTS) -> None:
    """Reject a table that misses a label the resolver can produce."""
    missing = [label for label in required if label not in profiles]
    if missing:
        raise PlacementError(f"placement profile table is missing: {', '.join(missing)}")

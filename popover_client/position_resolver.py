"""Placement resolution: collision avoidance plus the origin/scroll coordinate transform."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from popover_client.collision import choose_placement, compute_constraints
from popover_client.geometry import ContentDimensions, Rect
from popover_client.layout_nodes import ContainerContext, LayoutNode, build_container_context
from popover_client.placement import PLACEMENTS, validate_placement
from popover_client.placement_profiles import (
    DEFAULT_PROFILES,
    PlacementProfile,
    ProfileParams,
    StyleDescriptor,
    validate_profiles,
)
from popover_client.popover_config import PlacementOptions

_LOGGER = logging.getLogger("ModernPopover.Client.position")

ContainerGetter = Callable[[], Optional[LayoutNode]]


@dataclass(frozen=True)
class ResolvedPlacement:
    placement: str
    style: StyleDescriptor


def scroll_adjusted_rect(trigger: Rect, context: ContainerContext) -> Rect:
    """Express ``trigger`` relative to the origin's content box."""
    dy = context.origin_rect.top - context.scroll_top
    dx = context.origin_rect.left - context.scroll_left
    return trigger.translated(-dx, -dy)


def build_profile_params(
    content: ContentDimensions,
    options: PlacementOptions,
    context: ContainerContext,
) -> ProfileParams:
    fit_height, fit_width = options.resolve_fit_flags()
    return ProfileParams(
        offset=options.offset,
        with_arrow=options.with_arrow,
        arrow_size=options.arrow_size,
        space_between_popover_and_target=options.space_between_popover_and_target,
        min_space_between_popover_and_container=options.min_space_between_popover_and_container,
        avoid_overflow_bounds=options.avoid_overflow_bounds,
        fit_max_height_to_bounds=fit_height,
        fit_max_width_to_bounds=fit_width,
        max_height=options.max_height,
        max_width=options.max_width,
        animation=options.animation,
        opening_animation_translate_distance=options.opening_animation_translate_distance,
        closing_animation_translate_distance=options.closing_animation_translate_distance,
        content_width=content.width,
        content_height=content.height,
        container_width=context.origin_rect.width,
        container_height=context.origin_rect.height,
        scroll_top=context.scroll_top,
        scroll_left=context.scroll_left,
        extra=dict(content.extra),
    )


def resolve_placement(
    trigger: Optional[Rect],
    content: Optional[ContentDimensions],
    requested: str,
    options: PlacementOptions,
    container: Optional[ContainerContext],
    profiles: Mapping[str, PlacementProfile] = DEFAULT_PROFILES,
) -> Optional[ResolvedPlacement]:
    """Resolve one pass; ``None`` means the geometry is not available yet."""
    if trigger is None or content is None or container is None:
        return None
    if container.container_rect.is_empty:
        return None
    placement = requested
    if options.guess_better_position:
        limits = compute_constraints(
            container.container_rect,
            content,
            target_gap=options.space_between_popover_and_target,
            container_gap=options.min_space_between_popover_and_container,
        )
        placement = choose_placement(requested, trigger, limits)
    adjusted = scroll_adjusted_rect(trigger, container)
    style = profiles[placement](adjusted, build_profile_params(content, options, container))
    return ResolvedPlacement(placement=placement, style=style)


class PlacementResolver:
    """Holds the last resolved placement for one popover instance."""

    def __init__(
        self,
        placement: str,
        options: PlacementOptions,
        *,
        get_container: ContainerGetter,
        profiles: Optional[Mapping[str, PlacementProfile]] = None,
    ) -> None:
        self._placement = validate_placement(placement)
        self._options = options
        self._get_container = get_container
        self._profiles = DEFAULT_PROFILES if profiles is None else profiles
        validate_profiles(self._profiles, PLACEMENTS if options.guess_better_position else (placement,))
        self._current: Optional[ResolvedPlacement] = None

    @property
    def current(self) -> Optional[ResolvedPlacement]:
        return self._current

    def resolve(self, trigger: Optional[Rect], content: Optional[ContentDimensions]) -> Optional[ResolvedPlacement]:
        """Run a pass against the current container; keep the previous value on a skip."""
        if trigger is None or content is None:
            _LOGGER.debug("Placement pass skipped: trigger=%s content=%s", trigger is not None, content is not None)
            return self._current
        context = build_container_context(self._get_container())
        if context is None:
            _LOGGER.debug("Placement pass skipped: container unavailable")
            return self._current
        resolved = resolve_placement(trigger, content, self._placement, self._options, context, self._profiles)
        if resolved is None:
            return self._current
        if self._current is None or resolved.placement != self._current.placement:
            _LOGGER.debug(
                "Placement resolved: requested=%s actual=%s trigger=%s content=%.1fx%.1f",
                self._placement,
                resolved.placement,
                trigger.as_geometry(),
                content.width,
                content.height,
            )
        self._current = resolved
        return resolved

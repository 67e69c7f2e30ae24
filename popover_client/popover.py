"""Per-instance composition of the placement resolver and the visibility controller."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from popover_client.dimension_tracking import DimensionTracker, GeometryObserver
from popover_client.placement_profiles import PlacementProfile, StyleDescriptor
from popover_client.popover_config import PopoverSettings
from popover_client.popover_timers import AfterCancelFn, AfterFn, PopoverTimers
from popover_client.position_resolver import ContainerGetter, PlacementResolver, ResolvedPlacement
from popover_client.visibility_controller import PopoverEvent, VisibilityController, VisibilityState

_LOGGER = logging.getLogger("ModernPopover.Client.popover")


@dataclass(frozen=True)
class RenderState:
    """What the host render layer needs to mount, place and animate content."""

    is_open: bool
    placement: str
    style: Optional[StyleDescriptor] = None
    state: VisibilityState = field(default=VisibilityState.CLOSED, compare=False)


class Popover:
    """Owns one resolver and one visibility controller for a trigger/content pair."""

    def __init__(
        self,
        settings: PopoverSettings,
        *,
        dimensions: DimensionTracker,
        get_container: ContainerGetter,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        resize_observer: Optional[GeometryObserver] = None,
        motion_observer: Optional[GeometryObserver] = None,
        on_render: Optional[Callable[[RenderState], None]] = None,
        on_change_open: Optional[Callable[[bool], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        on_focus: Optional[Callable[[], None]] = None,
        on_blur: Optional[Callable[[], None]] = None,
        profiles: Optional[Mapping[str, PlacementProfile]] = None,
    ) -> None:
        self._settings = settings
        self._dimensions = dimensions
        self._on_render = on_render
        self._last_render: Optional[RenderState] = None
        self._resolver = PlacementResolver(
            settings.placement,
            settings.options,
            get_container=get_container,
            profiles=profiles,
        )
        self._controller = VisibilityController(
            settings,
            dimensions=dimensions,
            update_position=self.update_position,
            timers=PopoverTimers(after=after, after_cancel=after_cancel),
            on_change_open=on_change_open,
            on_close=on_close,
            on_focus=on_focus,
            on_blur=on_blur,
            on_state_change=self._handle_state_change,
        )
        if resize_observer is not None:
            self._controller.own_subscription(resize_observer.subscribe(self._controller.handle_geometry_change))
        if motion_observer is not None and settings.consider_trigger_motion:
            self._controller.own_subscription(motion_observer.subscribe(self._controller.handle_geometry_change))
        self._controller.start()

    # Read side -----------------------------------------------------------

    @property
    def settings(self) -> PopoverSettings:
        return self._settings

    @property
    def state(self) -> VisibilityState:
        return self._controller.state

    @property
    def is_open(self) -> bool:
        return self._controller.is_open

    @property
    def resolved(self) -> Optional[ResolvedPlacement]:
        return self._resolver.current

    @property
    def controller(self) -> VisibilityController:
        return self._controller

    def render_state(self) -> RenderState:
        resolved = self._resolver.current
        return RenderState(
            is_open=self._controller.is_open,
            placement=resolved.placement if resolved is not None else self._settings.placement,
            style=resolved.style if resolved is not None else None,
            state=self._controller.state,
        )

    # Caller API ----------------------------------------------------------

    def open(self) -> None:
        self._controller.open()

    def close(self) -> None:
        self._controller.close()

    def toggle(self) -> None:
        self._controller.toggle()

    def set_external_open(self, value: bool) -> None:
        self._controller.set_external_open(value)

    def dispatch(self, event: PopoverEvent) -> None:
        self._controller.dispatch(event)

    def update_position(self) -> Optional[ResolvedPlacement]:
        resolved = self._resolver.resolve(self._dimensions.trigger_rect(), self._dimensions.content_dimensions)
        self._publish()
        return resolved

    def refresh_content(self) -> None:
        """Forget the content measurement; an open popover measures again."""
        self._dimensions.invalidate()
        if self._controller.is_open:
            self._dimensions.request_measurement()

    def destroy(self) -> None:
        self._controller.destroy()
        _LOGGER.debug("Popover destroyed (placement=%s trigger=%s)", self._settings.placement, self._settings.trigger)

    # Internals -----------------------------------------------------------

    def _handle_state_change(self, previous: VisibilityState, current: VisibilityState) -> None:
        if current is VisibilityState.DESTROYED:
            return
        self._publish()

    def _publish(self) -> None:
        if self._on_render is None:
            return
        state = self.render_state()
        if state == self._last_render:
            return
        self._last_render = state
        self._on_render(state)

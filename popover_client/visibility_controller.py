"""Visibility state machine for a popover: measurement gate, debounced triggers, dismissal.

This module stays free of UI toolkit types; hosts inject timers, the dimension
tracker and the positioning callback, and forward their input events.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from popover_client.dimension_tracking import Detach, DimensionTracker
from popover_client.geometry import ContentDimensions
from popover_client.popover_config import (
    TRIGGER_CLICK,
    TRIGGER_CONTEXT_MENU,
    TRIGGER_FOCUS,
    TRIGGER_HOVER,
    PopoverSettings,
)
from popover_client.popover_timers import CLOSE_KEY, OPEN_KEY, SETTLE_KEY, PopoverTimers

_LOGGER = logging.getLogger("ModernPopover.Client.visibility")

KEY_ESCAPE = "Escape"
KEY_ENTER = "Enter"


class VisibilityState(enum.Enum):
    CLOSED = "closed"
    PENDING_MEASUREMENT = "pending_measurement"
    OPEN = "open"
    DESTROYED = "destroyed"


EVENT_CLICK = "click"
EVENT_CONTEXT_MENU = "contextMenu"
EVENT_MOUSE_ENTER = "mouseEnter"
EVENT_MOUSE_LEAVE = "mouseLeave"
EVENT_FOCUS = "focus"
EVENT_BLUR = "blur"
EVENT_KEY_DOWN = "keyDown"
EVENT_POINTER_DOWN = "pointerDown"
EVENT_GEOMETRY = "geometry"
EVENT_EXTERNAL = "external"


@dataclass(frozen=True)
class PopoverEvent:
    """Host input event queued for :meth:`VisibilityController.dispatch`."""

    kind: str
    key: Optional[str] = None
    inside_trigger: bool = False
    inside_content: bool = False
    value: Optional[bool] = None


StateChangeFn = Callable[[VisibilityState, VisibilityState], None]


class VisibilityController:
    """Decides when content is measured, positioned, shown or hidden."""

    def __init__(
        self,
        settings: PopoverSettings,
        *,
        dimensions: DimensionTracker,
        update_position: Callable[[], object],
        timers: PopoverTimers,
        on_change_open: Optional[Callable[[bool], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        on_focus: Optional[Callable[[], None]] = None,
        on_blur: Optional[Callable[[], None]] = None,
        on_state_change: Optional[StateChangeFn] = None,
    ) -> None:
        self._settings = settings
        self._dimensions = dimensions
        self._update_position = update_position
        self._timers = timers
        self._on_change_open = on_change_open
        self._on_close = on_close
        self._on_focus = on_focus
        self._on_blur = on_blur
        self._on_state_change = on_state_change
        self._state = VisibilityState.CLOSED
        self._settled = False
        self._subscriptions: List[Detach] = [dimensions.subscribe(self._handle_measurement)]

    # State ---------------------------------------------------------------

    @property
    def state(self) -> VisibilityState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is VisibilityState.OPEN

    @property
    def controlled(self) -> bool:
        return self._settings.controlled

    @property
    def destroyed(self) -> bool:
        return self._state is VisibilityState.DESTROYED

    def start(self) -> None:
        """Apply the configured initial visibility."""
        if self.controlled:
            self.set_external_open(self._settings.is_open)
        elif self._settings.is_open:
            self.open()

    # Caller API ----------------------------------------------------------

    def open(self) -> None:
        if self.destroyed:
            return
        if self.controlled:
            if self._state is VisibilityState.CLOSED:
                self._notify_change(True)
            return
        self._show(reason="open")

    def close(self) -> None:
        if self.destroyed:
            return
        self._timers.cancel(OPEN_KEY)
        if self.controlled:
            if self._state is not VisibilityState.CLOSED:
                self._notify_change(False)
            return
        self._hide(reason="close")

    def toggle(self) -> None:
        if self._state in (VisibilityState.OPEN, VisibilityState.PENDING_MEASUREMENT):
            self.close()
        else:
            self.open()

    def set_external_open(self, value: bool) -> None:
        """Reconcile with the externally driven visibility value (controlled mode)."""
        if self.destroyed:
            return
        if not self.controlled:
            _LOGGER.debug("Ignoring external visibility %s for an uncontrolled popover", value)
            return
        if value:
            self._show(reason="external")
        else:
            self._timers.cancel(OPEN_KEY)
            self._timers.cancel(CLOSE_KEY)
            self._hide(reason="external")

    # Trigger handlers ----------------------------------------------------

    def handle_click(self) -> None:
        if self._settings.trigger == TRIGGER_CLICK:
            self.toggle()

    def handle_context_menu(self) -> None:
        if self._settings.trigger == TRIGGER_CONTEXT_MENU:
            self.toggle()

    def handle_mouse_enter(self) -> None:
        if self.destroyed or self._settings.trigger != TRIGGER_HOVER:
            return
        self._timers.cancel(CLOSE_KEY)
        self._timers.schedule(OPEN_KEY, self._settings.mouse_enter_delay, self.open)

    def handle_mouse_leave(self) -> None:
        if self.destroyed or self._settings.trigger != TRIGGER_HOVER:
            return
        self._timers.cancel(OPEN_KEY)
        self._timers.schedule(CLOSE_KEY, self._settings.mouse_leave_delay, self.close)

    def handle_focus(self) -> None:
        if self.destroyed:
            return
        if self._on_focus is not None:
            self._on_focus()
        if self._settings.trigger == TRIGGER_FOCUS:
            self.open()

    def handle_blur(self) -> None:
        if self.destroyed:
            return
        if self._on_blur is not None:
            self._on_blur()
        if self._settings.trigger == TRIGGER_FOCUS:
            self.close()

    def handle_key(self, key: str) -> None:
        if self._state is not VisibilityState.OPEN:
            return
        if key == KEY_ESCAPE and self._settings.close_on_escape:
            self.close()
        elif key == KEY_ENTER and self._settings.close_on_enter:
            self.close()

    def handle_pointer_down(self, *, inside_trigger: bool, inside_content: bool) -> None:
        if self._state is not VisibilityState.OPEN:
            return
        if not self._settings.effective_close_on_remote_click:
            return
        if inside_trigger or inside_content:
            return
        self.close()

    def handle_geometry_change(self) -> None:
        if self._state is VisibilityState.OPEN:
            self._update_position()

    def dispatch(self, event: PopoverEvent) -> None:
        kind = event.kind
        if kind == EVENT_CLICK:
            self.handle_click()
        elif kind == EVENT_CONTEXT_MENU:
            self.handle_context_menu()
        elif kind == EVENT_MOUSE_ENTER:
            self.handle_mouse_enter()
        elif kind == EVENT_MOUSE_LEAVE:
            self.handle_mouse_leave()
        elif kind == EVENT_FOCUS:
            self.handle_focus()
        elif kind == EVENT_BLUR:
            self.handle_blur()
        elif kind == EVENT_KEY_DOWN:
            self.handle_key(event.key or "")
        elif kind == EVENT_POINTER_DOWN:
            self.handle_pointer_down(inside_trigger=event.inside_trigger, inside_content=event.inside_content)
        elif kind == EVENT_GEOMETRY:
            self.handle_geometry_change()
        elif kind == EVENT_EXTERNAL:
            self.set_external_open(bool(event.value))
        else:
            raise ValueError(f"unknown popover event kind {kind!r}")

    # Lifecycle -----------------------------------------------------------

    def own_subscription(self, detach: Detach) -> None:
        """Detach ``detach`` when the controller is destroyed."""
        self._subscriptions.append(detach)

    def destroy(self) -> None:
        if self.destroyed:
            return
        self._timers.cancel_all()
        subscriptions, self._subscriptions = self._subscriptions, []
        for detach in subscriptions:
            detach()
        self._transition(VisibilityState.DESTROYED, reason="destroy")

    # Internals -----------------------------------------------------------

    def _show(self, *, reason: str) -> None:
        if self._state in (VisibilityState.OPEN, VisibilityState.PENDING_MEASUREMENT):
            return
        if self._dimensions.content_dimensions is None:
            self._settled = False
            self._transition(VisibilityState.PENDING_MEASUREMENT, reason=reason)
            self._dimensions.request_measurement()
            self._timers.schedule(SETTLE_KEY, self._settings.settle_delay, self._handle_settled)
            return
        self._enter_open(reason=reason)

    def _hide(self, *, reason: str) -> None:
        self._timers.cancel(SETTLE_KEY)
        previous = self._state
        if previous is VisibilityState.CLOSED:
            return
        self._transition(VisibilityState.CLOSED, reason=reason)
        if previous is VisibilityState.OPEN:
            if not self.controlled:
                self._notify_change(False)
            if self._on_close is not None:
                self._on_close()

    def _enter_open(self, *, reason: str) -> None:
        self._update_position()
        self._transition(VisibilityState.OPEN, reason=reason)
        if not self.controlled:
            self._notify_change(True)

    def _handle_settled(self) -> None:
        self._settled = True
        if self._state is not VisibilityState.PENDING_MEASUREMENT:
            return
        if self._dimensions.content_dimensions is None:
            _LOGGER.debug("Settle delay elapsed without content dimensions; waiting for measurement")
            return
        self._enter_open(reason="measured")

    def _handle_measurement(self, _dimensions: ContentDimensions) -> None:
        if self._state is VisibilityState.PENDING_MEASUREMENT and self._settled:
            self._enter_open(reason="late measurement")
        elif self._state is VisibilityState.OPEN:
            self._update_position()

    def _notify_change(self, value: bool) -> None:
        if self._on_change_open is not None:
            self._on_change_open(value)

    def _transition(self, new_state: VisibilityState, *, reason: str) -> None:
        previous = self._state
        if previous is new_state:
            return
        self._state = new_state
        _LOGGER.debug("Popover visibility %s -> %s (reason=%s)", previous.value, new_state.value, reason)
        if self._on_state_change is not None:
            self._on_state_change(previous, new_state)

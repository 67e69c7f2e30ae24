"""Collaborator contracts: content measurement, trigger geometry and change observers."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from popover_client.geometry import ContentDimensions, Rect

_LOGGER = logging.getLogger("ModernPopover.Client.dimensions")

Detach = Callable[[], None]


class GeometryObserver(Protocol):
    """Calls back with no payload when the viewport or a tracked element changes."""

    def subscribe(self, callback: Callable[[], None]) -> Detach: ...


class GeometrySignal:
    """Plain observer: hosts call :meth:`notify` from their resize/motion hooks."""

    def __init__(self, name: str = "geometry") -> None:
        self.name = name
        self._callbacks: List[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> Detach:
        self._callbacks.append(callback)

        def detach() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return detach

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def notify(self) -> None:
        for callback in list(self._callbacks):
            callback()


class DimensionTracker:
    """Holds the last content measurement and reads the trigger rect on demand.

    ``measure_fn`` asks the host to render content off-screen; the host answers
    later through :meth:`report`. Hosts able to measure synchronously may call
    :meth:`report` from inside ``measure_fn``.
    """

    def __init__(
        self,
        *,
        trigger_rect_fn: Callable[[], Optional[Rect]],
        measure_fn: Optional[Callable[[], None]] = None,
    ) -> None:
        self._trigger_rect_fn = trigger_rect_fn
        self._measure_fn = measure_fn
        self._dimensions: Optional[ContentDimensions] = None
        self._measuring = False
        self._listeners: List[Callable[[ContentDimensions], None]] = []

    @property
    def content_dimensions(self) -> Optional[ContentDimensions]:
        return self._dimensions

    @property
    def measuring(self) -> bool:
        return self._measuring

    def trigger_rect(self) -> Optional[Rect]:
        return self._trigger_rect_fn()

    def request_measurement(self) -> None:
        self._measuring = True
        _LOGGER.debug("Content measurement requested")
        if self._measure_fn is not None:
            self._measure_fn()

    def report(self, dimensions: ContentDimensions) -> None:
        self._dimensions = dimensions
        self._measuring = False
        _LOGGER.debug("Content measured: %.1fx%.1f", dimensions.width, dimensions.height)
        for listener in list(self._listeners):
            listener(dimensions)

    def invalidate(self) -> None:
        """Forget the measurement after the content changed."""
        self._dimensions = None

    def subscribe(self, listener: Callable[[ContentDimensions], None]) -> Detach:
        self._listeners.append(listener)

        def detach() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return detach

"""PyQt6 host adapters: timers, widget geometry, measurement, observers and rendering."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from PyQt6.QtCore import QEvent, QObject, QPoint, QTimer
from PyQt6.QtWidgets import QAbstractScrollArea, QScrollArea, QWidget

from popover_client.dimension_tracking import Detach, DimensionTracker, GeometrySignal
from popover_client.geometry import ContentDimensions, Rect
from popover_client.popover import RenderState

_CLIENT_LOGGER = logging.getLogger("ModernPopover.Client.qt")

_GEOMETRY_EVENTS = (QEvent.Type.Move, QEvent.Type.Resize, QEvent.Type.Show)


def widget_rect(widget: QWidget) -> Rect:
    """Global rect of ``widget`` (the viewport for scroll areas)."""
    target = widget.viewport() if isinstance(widget, QAbstractScrollArea) else widget
    top_left = target.mapToGlobal(QPoint(0, 0))
    return Rect.from_xywh(top_left.x(), top_left.y(), target.width(), target.height())


class QtLayoutNode:
    """Adapts a QWidget to the layout node protocol used by the resolver.

    Every Qt widget positions its children relative to itself, so all nodes
    report a non-static position; scroll areas report their scrollbar offsets.
    """

    def __init__(self, widget: QWidget) -> None:
        self._widget = widget

    @property
    def widget(self) -> QWidget:
        return self._widget

    @property
    def rect(self) -> Rect:
        return widget_rect(self._widget)

    @property
    def parent(self) -> Optional["QtLayoutNode"]:
        parent = self._widget.parentWidget()
        return QtLayoutNode(parent) if parent is not None else None

    @property
    def is_body(self) -> bool:
        return self._widget.isWindow()

    @property
    def position(self) -> str:
        return "relative"

    @property
    def scroll_top(self) -> float:
        if isinstance(self._widget, QAbstractScrollArea):
            return float(self._widget.verticalScrollBar().value())
        return 0.0

    @property
    def scroll_left(self) -> float:
        if isinstance(self._widget, QAbstractScrollArea):
            return float(self._widget.horizontalScrollBar().value())
        return 0.0

    @property
    def client_height(self) -> float:
        if isinstance(self._widget, QAbstractScrollArea):
            return float(self._widget.viewport().height())
        return float(self._widget.height())

    @property
    def scroll_height(self) -> float:
        if isinstance(self._widget, QAbstractScrollArea):
            return self.client_height + float(self._widget.verticalScrollBar().maximum())
        return float(self._widget.height())


def content_parent_for(container: QWidget) -> QWidget:
    """Widget content must be parented to so origin-relative offsets apply."""
    if isinstance(container, QScrollArea) and container.widget() is not None:
        return container.widget()
    return container


class QtDimensionTracker(DimensionTracker):
    """Measures content from its size hint; Qt can do this without showing it."""

    def __init__(self, trigger: QWidget, content: QWidget) -> None:
        super().__init__(trigger_rect_fn=self._read_trigger_rect, measure_fn=self._measure)
        self._trigger = trigger
        self._content = content

    def _read_trigger_rect(self) -> Optional[Rect]:
        if not self._trigger.isVisible():
            return None
        return widget_rect(self._trigger)

    def _measure(self) -> None:
        hint = self._content.sizeHint()
        if not hint.isValid():
            _CLIENT_LOGGER.debug("Content size hint invalid; measurement deferred")
            return
        self.report(ContentDimensions(width=float(hint.width()), height=float(hint.height())))


class QtTimerScheduler(QObject):
    """``after``/``after_cancel`` pair backed by single-shot QTimers."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._timers: Dict[int, QTimer] = {}

    def after(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)

        def fire() -> None:
            self._timers.pop(id(timer), None)
            timer.deleteLater()
            callback()

        timer.timeout.connect(fire)
        self._timers[id(timer)] = timer
        timer.start(max(0, int(delay_ms)))
        return timer

    def after_cancel(self, handle: object) -> None:
        if not isinstance(handle, QTimer):
            return
        self._timers.pop(id(handle), None)
        handle.stop()
        handle.deleteLater()

    @property
    def pending_count(self) -> int:
        return len(self._timers)


class QtGeometryObserver(QObject):
    """Notifies subscribers when any watched widget moves, resizes or is shown."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._signal = GeometrySignal("qt")
        self._watched: list[QWidget] = []

    def watch(self, widget: QWidget) -> None:
        widget.installEventFilter(self)
        self._watched.append(widget)

    def unwatch_all(self) -> None:
        watched, self._watched = self._watched, []
        for widget in watched:
            widget.removeEventFilter(self)

    def subscribe(self, callback: Callable[[], None]) -> Detach:
        return self._signal.subscribe(callback)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if event.type() in _GEOMETRY_EVENTS:
            self._signal.notify()
        return False


def apply_render_state(content: QWidget, state: RenderState) -> None:
    """Show, place and size ``content`` from the popover's render state."""
    if not state.is_open or state.style is None:
        if content.isVisible():
            content.hide()
        return
    style = state.style.style
    max_width = style.get("maxWidth")
    max_height = style.get("maxHeight")
    if max_width is not None:
        content.setMaximumWidth(max(0, int(round(max_width))))
    if max_height is not None:
        content.setMaximumHeight(max(0, int(round(max_height))))
    content.move(int(round(style.get("left", 0.0))), int(round(style.get("top", 0.0))))
    content.show()
    content.raise_()

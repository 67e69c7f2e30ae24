"""Container tree walk: offset origin, scroll frame and the per-pass container snapshot."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from popover_client.geometry import Rect

_LOGGER = logging.getLogger("ModernPopover.Client.layout")

STATIC_POSITION = "static"


class LayoutNode(Protocol):
    """Minimal view of a host element needed to place content inside it."""

    @property
    def rect(self) -> Rect: ...

    @property
    def parent(self) -> Optional["LayoutNode"]: ...

    @property
    def is_body(self) -> bool: ...

    @property
    def position(self) -> str: ...

    @property
    def scroll_top(self) -> float: ...

    @property
    def scroll_left(self) -> float: ...

    @property
    def scroll_height(self) -> float: ...

    @property
    def client_height(self) -> float: ...


@dataclass(eq=False)
class ElementBox:
    """Plain in-memory layout node used by headless hosts, the CLI and tests."""

    name: str
    rect: Rect
    position: str = STATIC_POSITION
    is_body: bool = False
    parent: Optional["ElementBox"] = None
    scroll_top: float = 0.0
    scroll_left: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0

    def scroll_by(self, dx: float, dy: float) -> None:
        self.scroll_left += dx
        self.scroll_top += dy

    def __repr__(self) -> str:
        return f"ElementBox({self.name!r}, position={self.position!r}, rect={self.rect.as_geometry()})"


@dataclass(frozen=True)
class ContainerContext:
    """Snapshot of the container geometry for a single resolution pass."""

    container_rect: Rect
    origin_rect: Rect
    scroll_top: float = 0.0
    scroll_left: float = 0.0
    origin: Optional[object] = field(default=None, compare=False)
    scroll_frame: Optional[object] = field(default=None, compare=False)


def find_offset_origin(node: LayoutNode) -> LayoutNode:
    """Return the first node, walking up from ``node``, that is the body or positioned."""
    current = node
    while True:
        if current.is_body or current.position != STATIC_POSITION:
            return current
        parent = current.parent
        if parent is None:
            return current
        current = parent


def find_scroll_frame(node: LayoutNode) -> LayoutNode:
    """Return the nearest node whose content overflows its box, else the body/root."""
    current = node
    while True:
        if current.is_body:
            return current
        if current.scroll_height > current.client_height:
            return current
        parent = current.parent
        if parent is None:
            return current
        current = parent


def build_container_context(container: Optional[LayoutNode]) -> Optional[ContainerContext]:
    """Snapshot ``container``; ``None`` when it is missing or has no area."""
    if container is None:
        return None
    container_rect = container.rect
    if container_rect.is_empty:
        _LOGGER.debug("Container %r has no area; skipping placement pass", container)
        return None
    origin = find_offset_origin(container)
    scroll_frame = find_scroll_frame(container)
    return ContainerContext(
        container_rect=container_rect,
        origin_rect=origin.rect,
        scroll_top=float(scroll_frame.scroll_top),
        scroll_left=float(scroll_frame.scroll_left),
        origin=origin,
        scroll_frame=scroll_frame,
    )

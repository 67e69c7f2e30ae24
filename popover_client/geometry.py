"""Geometry value types shared by the resolver and its collaborators (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

Geometry = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Rect:
    """Viewport-space snapshot of an element box, retaken on every pass."""

    top: float
    left: float
    right: float
    bottom: float
    width: float
    height: float

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "Rect":
        return cls(
            top=float(y),
            left=float(x),
            right=float(x) + float(width),
            bottom=float(y) + float(height),
            width=float(width),
            height=float(height),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Rect":
        """Build from ``{x, y, width, height}`` or ``{top, left, width, height}``."""
        x = data.get("x", data.get("left", 0.0))
        y = data.get("y", data.get("top", 0.0))
        return cls.from_xywh(float(x), float(y), float(data.get("width", 0.0)), float(data.get("height", 0.0)))

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(
            top=self.top + dy,
            left=self.left + dx,
            right=self.right + dx,
            bottom=self.bottom + dy,
            width=self.width,
            height=self.height,
        )

    def as_geometry(self) -> Geometry:
        return (self.left, self.top, self.width, self.height)


@dataclass(frozen=True)
class ContentDimensions:
    """Measured content size; ``extra`` is opaque to the resolver."""

    width: float
    height: float
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContentDimensions":
        extra = {key: value for key, value in data.items() if key not in {"width", "height"}}
        return cls(width=float(data.get("width", 0.0)), height=float(data.get("height", 0.0)), extra=extra)

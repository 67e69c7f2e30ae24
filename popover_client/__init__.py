"""Anchored popover placement and visibility control."""

from popover_client.geometry import ContentDimensions, Rect
from popover_client.popover import Popover, RenderState
from popover_client.popover_config import PlacementOptions, PopoverSettings
from popover_client.position_resolver import PlacementResolver, ResolvedPlacement, resolve_placement
from popover_client.visibility_controller import PopoverEvent, VisibilityController, VisibilityState

__version__ = "0.1.0"

__all__ = [
    "ContentDimensions",
    "PlacementOptions",
    "PlacementResolver",
    "Popover",
    "PopoverEvent",
    "PopoverSettings",
    "Rect",
    "RenderState",
    "ResolvedPlacement",
    "VisibilityController",
    "VisibilityState",
    "resolve_placement",
    "__version__",
]

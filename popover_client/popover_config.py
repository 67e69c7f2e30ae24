"""Configuration surface for popover instances.

Settings are validated when they are built so a bad placement or trigger kind
fails at configuration time instead of misbehaving mid-session.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from popover_client.errors import PopoverConfigError
from popover_client.placement import validate_placement

_LOGGER = logging.getLogger("ModernPopover.Client.config")

DEBUG_ENV_VAR = "POPOVER_DEBUG"

TRIGGER_CLICK = "click"
TRIGGER_HOVER = "hover"
TRIGGER_FOCUS = "focus"
TRIGGER_CONTEXT_MENU = "contextMenu"
TRIGGER_KINDS = (TRIGGER_CLICK, TRIGGER_HOVER, TRIGGER_FOCUS, TRIGGER_CONTEXT_MENU)

DEFAULT_MOUSE_ENTER_DELAY_MS = 100
DEFAULT_MOUSE_LEAVE_DELAY_MS = 300
DEFAULT_SETTLE_DELAY_MS = 100


def _require_non_negative(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise PopoverConfigError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise PopoverConfigError(f"{name} must be >= 0, got {value!r}")


@dataclass(frozen=True)
class PlacementOptions:
    """Geometry options handed to the resolver for every pass."""

    offset: Tuple[float, float] = (0.0, 0.0)
    with_arrow: bool = True
    arrow_size: float = 8.0
    space_between_popover_and_target: float = 8.0
    min_space_between_popover_and_container: float = 8.0
    guess_better_position: bool = True
    avoid_overflow_bounds: bool = True
    fit_max_height_to_bounds: Optional[bool] = None
    fit_max_width_to_bounds: Optional[bool] = None
    max_height: Optional[float] = None
    max_width: Optional[float] = None
    animation: bool = True
    opening_animation_translate_distance: float = 10.0
    closing_animation_translate_distance: float = 10.0

    def __post_init__(self) -> None:
        offset = self.offset
        if not isinstance(offset, (tuple, list)) or len(offset) != 2:
            raise PopoverConfigError(f"offset must be an (x, y) pair, got {offset!r}")
        try:
            pair = (float(offset[0]), float(offset[1]))
        except (TypeError, ValueError) as exc:
            raise PopoverConfigError(f"offset must be numeric, got {offset!r}") from exc
        object.__setattr__(self, "offset", pair)
        for name in (
            "arrow_size",
            "space_between_popover_and_target",
            "min_space_between_popover_and_container",
            "max_height",
            "max_width",
            "opening_animation_translate_distance",
            "closing_animation_translate_distance",
        ):
            _require_non_negative(name, getattr(self, name))

    def resolve_fit_flags(self) -> Tuple[bool, bool]:
        """Fit-to-bounds defaults to on unless an explicit max size was given."""
        fit_height = self.fit_max_height_to_bounds
        if not isinstance(fit_height, bool):
            fit_height = not self.max_height
        fit_width = self.fit_max_width_to_bounds
        if not isinstance(fit_width, bool):
            fit_width = not self.max_width
        return fit_height, fit_width


@dataclass(frozen=True)
class PopoverSettings:
    """Per-instance caller configuration."""

    placement: str = "top"
    trigger: str = TRIGGER_HOVER
    controlled: bool = False
    is_open: bool = False
    consider_trigger_motion: bool = False
    close_on_escape: bool = True
    close_on_enter: bool = False
    close_on_remote_click: Optional[bool] = None
    mouse_enter_delay: float = DEFAULT_MOUSE_ENTER_DELAY_MS
    mouse_leave_delay: float = DEFAULT_MOUSE_LEAVE_DELAY_MS
    settle_delay: float = DEFAULT_SETTLE_DELAY_MS
    options: PlacementOptions = field(default_factory=PlacementOptions)

    def __post_init__(self) -> None:
        validate_placement(self.placement)
        if self.trigger not in TRIGGER_KINDS:
            raise PopoverConfigError(
                f"unknown trigger {self.trigger!r}; expected one of {', '.join(TRIGGER_KINDS)}"
            )
        for name in ("mouse_enter_delay", "mouse_leave_delay", "settle_delay"):
            _require_non_negative(name, getattr(self, name))
        if not isinstance(self.options, PlacementOptions):
            raise PopoverConfigError(f"options must be PlacementOptions, got {type(self.options).__name__}")

    @property
    def effective_close_on_remote_click(self) -> bool:
        if self.close_on_remote_click is None:
            return self.trigger in (TRIGGER_CLICK, TRIGGER_CONTEXT_MENU)
        return bool(self.close_on_remote_click)

    def with_changes(self, **changes: Any) -> "PopoverSettings":
        return replace(self, **changes)


_CAMEL_ALIASES = {
    "isOpen": "is_open",
    "isOpenControlled": "controlled",
    "considerTriggerMotion": "consider_trigger_motion",
    "closeOnEscape": "close_on_escape",
    "closeOnEnter": "close_on_enter",
    "closeOnRemoteClick": "close_on_remote_click",
    "mouseEnterDelay": "mouse_enter_delay",
    "mouseLeaveDelay": "mouse_leave_delay",
    "settleDelay": "settle_delay",
    "withArrow": "with_arrow",
    "arrowSize": "arrow_size",
    "spaceBetweenPopoverAndTarget": "space_between_popover_and_target",
    "minSpaceBetweenPopoverAndContainer": "min_space_between_popover_and_container",
    "guessBetterPosition": "guess_better_position",
    "avoidOverflowBounds": "avoid_overflow_bounds",
    "fitMaxHeightToBounds": "fit_max_height_to_bounds",
    "fitMaxWidthToBounds": "fit_max_width_to_bounds",
    "maxHeight": "max_height",
    "maxWidth": "max_width",
    "openingAnimationTranslateDistance": "opening_animation_translate_distance",
    "closingAnimationTranslateDistance": "closing_animation_translate_distance",
}

_OPTION_FIELDS = {item.name for item in fields(PlacementOptions)}
_SETTING_FIELDS = {item.name for item in fields(PopoverSettings)} - {"options"}


def settings_from_mapping(data: Mapping[str, Any]) -> PopoverSettings:
    """Build settings from a flat mapping of camelCase or snake_case keys."""
    if not isinstance(data, Mapping):
        raise PopoverConfigError(f"settings must be a mapping, got {type(data).__name__}")
    settings_kwargs: Dict[str, Any] = {}
    option_kwargs: Dict[str, Any] = {}
    nested = data.get("options")
    items = list(data.items())
    if isinstance(nested, Mapping):
        items.extend(nested.items())
    for raw_key, value in items:
        if raw_key == "options":
            continue
        key = _CAMEL_ALIASES.get(raw_key, raw_key)
        if key in _SETTING_FIELDS:
            settings_kwargs[key] = value
        elif key in _OPTION_FIELDS:
            option_kwargs[key] = tuple(value) if key == "offset" and isinstance(value, list) else value
        else:
            raise PopoverConfigError(f"unknown popover setting {raw_key!r}")
    options = PlacementOptions(**option_kwargs)
    return PopoverSettings(options=options, **settings_kwargs)


def load_popover_settings(path: Path) -> PopoverSettings:
    """Read settings from ``path``; a missing or unreadable file yields defaults."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return PopoverSettings()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Ignoring malformed popover settings %s: %s", path, exc)
        return PopoverSettings()
    if not isinstance(data, dict):
        _LOGGER.warning("Ignoring popover settings %s: top-level value is not an object", path)
        return PopoverSettings()
    return settings_from_mapping(data)


def debug_enabled_from_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    value = env.get(DEBUG_ENV_VAR)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}

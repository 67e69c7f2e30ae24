#!/usr/bin/env python3
"""Resolve a popover placement for a JSON scene and print the result."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from popover_client.errors import PopoverConfigError
from popover_client.geometry import ContentDimensions, Rect
from popover_client.layout_nodes import ElementBox, build_container_context
from popover_client.logging_utils import LOGGER_NAME, configure_logging
from popover_client.placement import PLACEMENTS
from popover_client.popover_config import debug_enabled_from_env, settings_from_mapping
from popover_client.position_resolver import ResolvedPlacement, resolve_placement

_LOGGER = logging.getLogger(LOGGER_NAME)


class SceneError(ValueError):
    """Scene file is unreadable or misses a required block."""


def _require_mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SceneError(f"{label} must be an object, got {type(value).__name__}")
    return value


def build_container_chain(entries: List[Mapping[str, Any]]) -> ElementBox:
    """Build nodes root-first and return the last entry (the container)."""
    if not isinstance(entries, list) or not entries:
        raise SceneError("scene.container must list at least one node")
    parent: Optional[ElementBox] = None
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping) or not isinstance(entry.get("rect"), Mapping):
            raise SceneError(f"scene.container[{index}] needs a rect object")
        try:
            rect = Rect.from_mapping(entry["rect"])
            parent = ElementBox(
                name=str(entry.get("name", f"node{index}")),
                rect=rect,
                position=str(entry.get("position", "static")),
                is_body=bool(entry.get("is_body", index == 0)),
                parent=parent,
                scroll_top=float(entry.get("scroll_top", 0.0)),
                scroll_left=float(entry.get("scroll_left", 0.0)),
                scroll_height=float(entry.get("scroll_height", rect.height)),
                client_height=float(entry.get("client_height", rect.height)),
            )
        except (TypeError, ValueError) as exc:
            raise SceneError(f"scene.container[{index}] has a non-numeric value: {exc}") from exc
    return parent


def load_scene(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SceneError(f"scene file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise SceneError(f"failed to read scene {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SceneError("scene must be a JSON object")
    for key in ("trigger", "content", "container"):
        if key not in data:
            raise SceneError(f"scene is missing {key!r}")
    return data


def resolve_scene(scene: Mapping[str, Any], placement: Optional[str] = None) -> Optional[ResolvedPlacement]:
    settings_data = dict(_require_mapping(scene.get("settings") or {}, "scene.settings"))
    if placement is not None:
        settings_data["placement"] = placement
    settings = settings_from_mapping(settings_data)
    container = build_container_chain(scene["container"])
    trigger_data = _require_mapping(scene["trigger"], "scene.trigger")
    content_data = _require_mapping(scene["content"], "scene.content")
    try:
        trigger = Rect.from_mapping(trigger_data)
        content = ContentDimensions.from_mapping(content_data)
    except (TypeError, ValueError) as exc:
        raise SceneError(f"scene trigger/content has a non-numeric value: {exc}") from exc
    return resolve_placement(
        trigger,
        content,
        settings.placement,
        settings.options,
        build_container_context(container),
    )


def format_result(resolved: ResolvedPlacement) -> Dict[str, Any]:
    style = resolved.style
    return {
        "placement": resolved.placement,
        "style": dict(style.style),
        "arrowOffset": style.arrow_offset,
        "initial": dict(style.initial),
        "animate": dict(style.animate),
        "exit": dict(style.exit),
    }


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve a popover placement for a JSON scene")
    parser.add_argument("scene", type=Path, help="Scene JSON with trigger, content, container and optional settings")
    parser.add_argument("--placement", choices=PLACEMENTS, help="Override the requested placement")
    parser.add_argument("--debug", action="store_true", help="Write debug logs")
    parser.add_argument("--log-dir", type=Path, help="Directory for the rotating log file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    debug = args.debug or debug_enabled_from_env()
    if debug or args.log_dir is not None:
        configure_logging(debug_enabled=debug, log_dir=args.log_dir)

    try:
        scene = load_scene(args.scene.expanduser())
        resolved = resolve_scene(scene, args.placement)
    except (SceneError, PopoverConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if resolved is None:
        _LOGGER.info("Scene %s could not be resolved (container has no area)", args.scene)
        print("error: scene geometry is not resolvable", file=sys.stderr)
        return 1
    print(json.dumps(format_result(resolved), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

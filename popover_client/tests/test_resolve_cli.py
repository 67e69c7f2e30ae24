from __future__ import annotations

import json
import logging

import pytest

from popover_client import resolve_cli
from popover_client.logging_utils import LOG_FILENAME, LOGGER_NAME


def _write_scene(tmp_path, **overrides):
    scene = {
        "trigger": {"x": 450, "y": 400, "width": 100, "height": 20},
        "content": {"width": 100, "height": 50},
        "container": [{"name": "body", "rect": {"x": 0, "y": 0, "width": 1000, "height": 800}}],
    }
    scene.update(overrides)
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(scene), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _no_debug_env(monkeypatch):
    monkeypatch.delenv("POPOVER_DEBUG", raising=False)


def test_prints_resolved_placement(tmp_path, capsys) -> None:
    path = _write_scene(tmp_path)
    assert resolve_cli.main([str(path)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["placement"] == "top"
    assert result["style"]["top"] == pytest.approx(338)
    assert result["arrowOffset"] == pytest.approx(50)
    assert result["animate"] == {"opacity": 1.0, "x": 0.0, "y": 0.0}


def test_placement_override_and_collision(tmp_path, capsys) -> None:
    path = _write_scene(tmp_path)
    assert resolve_cli.main([str(path), "--placement", "bottom"]) == 0
    assert json.loads(capsys.readouterr().out)["placement"] == "bottom"

    near_top = _write_scene(tmp_path, trigger={"x": 450, "y": 30, "width": 100, "height": 20})
    assert resolve_cli.main([str(near_top)]) == 0
    assert json.loads(capsys.readouterr().out)["placement"] == "bottom"


def test_scene_settings_are_applied(tmp_path, capsys) -> None:
    path = _write_scene(tmp_path, settings={"placement": "right", "withArrow": False})
    assert resolve_cli.main([str(path)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["placement"] == "right"
    assert result["arrowOffset"] is None
    assert result["style"]["left"] == pytest.approx(558)


def test_nested_container_chain(tmp_path, capsys) -> None:
    path = _write_scene(
        tmp_path,
        container=[
            {"name": "body", "rect": {"x": 0, "y": 0, "width": 1000, "height": 800}},
            {
                "name": "card",
                "position": "relative",
                "rect": {"x": 100, "y": 100, "width": 400, "height": 300},
                "scroll_top": 40,
                "scroll_height": 1000,
            },
        ],
        trigger={"x": 250, "y": 210, "width": 100, "height": 20},
    )
    assert resolve_cli.main([str(path), "--placement", "bottom"]) == 0
    result = json.loads(capsys.readouterr().out)
    # Trigger bottom 230 maps to 230 - 100 + 40 inside the scrolled card.
    assert result["style"]["top"] == pytest.approx(170 + 12)


def test_missing_scene_blocks_exit_with_config_error(tmp_path, capsys) -> None:
    path = tmp_path / "scene.json"
    path.write_text(json.dumps({"trigger": {}}), encoding="utf-8")
    assert resolve_cli.main([str(path)]) == 2
    assert "missing 'content'" in capsys.readouterr().err

    assert resolve_cli.main([str(tmp_path / "absent.json")]) == 2


def test_invalid_settings_exit_with_config_error(tmp_path, capsys) -> None:
    path = _write_scene(tmp_path, settings={"placement": "middle"})
    assert resolve_cli.main([str(path)]) == 2
    assert capsys.readouterr().err.startswith("error:")


def test_collapsed_container_is_unresolvable(tmp_path, capsys) -> None:
    path = _write_scene(tmp_path, container=[{"rect": {"x": 0, "y": 0, "width": 0, "height": 0}}])
    assert resolve_cli.main([str(path)]) == 1
    assert "not resolvable" in capsys.readouterr().err


def test_unknown_placement_flag_rejected_by_parser(tmp_path) -> None:
    path = _write_scene(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        resolve_cli.main([str(path), "--placement", "middle"])
    assert excinfo.value.code == 2


def test_log_dir_writes_rotating_log(tmp_path) -> None:
    path = _write_scene(tmp_path)
    log_dir = tmp_path / "logs"
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    try:
        assert resolve_cli.main([str(path), "--debug", "--log-dir", str(log_dir)]) == 0
        assert (log_dir / LOG_FILENAME).exists()
    finally:
        for handler in list(logger.handlers):
            if handler not in before:
                logger.removeHandler(handler)
                handler.close()


@pytest.mark.parametrize(
    "overrides",
    [
        {"trigger": {"x": "abc", "y": 400, "width": 100, "height": 20}},
        {"trigger": [1, 2, 3, 4]},
        {"content": "100x50"},
        {"content": {"width": None, "height": 50}},
        {"settings": ["placement", "top"]},
        {"container": {"rect": {"x": 0, "y": 0, "width": 1000, "height": 800}}},
        {"container": [{"rect": {"x": 0, "y": 0, "width": 1000, "height": 800}, "scroll_top": "far"}]},
    ],
)
def test_malformed_scene_values_exit_with_config_error(tmp_path, capsys, overrides) -> None:
    path = _write_scene(tmp_path, **overrides)
    assert resolve_cli.main([str(path)]) == 2
    assert capsys.readouterr().err.startswith("error: scene")


def test_build_container_chain_rejects_empty_chain() -> None:
    with pytest.raises(resolve_cli.SceneError):
        resolve_cli.build_container_chain([])

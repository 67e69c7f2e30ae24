from __future__ import annotations

import pytest

from popover_client.dimension_tracking import DimensionTracker, GeometrySignal
from popover_client.geometry import ContentDimensions, Rect
from popover_client.layout_nodes import ElementBox
from popover_client.popover import Popover, RenderState
from popover_client.popover_config import PopoverSettings
from popover_client.visibility_controller import PopoverEvent, VisibilityState

CONTENT = ContentDimensions(width=100, height=50)


class Scene:
    def __init__(self, clock, settings: PopoverSettings, *, measure_sync: bool = True) -> None:
        self.trigger = Rect.from_xywh(450, 400, 100, 20)
        self.body = ElementBox("body", Rect.from_xywh(0, 0, 1000, 800), is_body=True, client_height=800, scroll_height=800)
        self.content = CONTENT
        self.renders: list[RenderState] = []
        self.resize = GeometrySignal("resize")
        self.motion = GeometrySignal("motion")
        self.tracker = DimensionTracker(
            trigger_rect_fn=lambda: self.trigger,
            measure_fn=self._measure if measure_sync else None,
        )
        self.popover = Popover(
            settings,
            dimensions=self.tracker,
            get_container=lambda: self.body,
            after=clock.after,
            after_cancel=clock.after_cancel,
            resize_observer=self.resize,
            motion_observer=self.motion,
            on_render=self.renders.append,
        )

    def _measure(self) -> None:
        self.tracker.report(self.content)


def test_open_publishes_position_then_visibility(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    assert scene.renders == []

    scene.popover.open()
    assert scene.popover.state is VisibilityState.PENDING_MEASUREMENT
    clock.advance(100)

    assert scene.popover.is_open
    assert [render.is_open for render in scene.renders] == [False, False, True]
    pending, positioned, shown = scene.renders
    assert pending.style is None
    assert positioned.placement == "top" and positioned.style is not None
    assert shown.style.style["top"] == pytest.approx(338)
    assert scene.popover.resolved.placement == "top"


def test_resize_reresolves_while_open(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    scene.popover.open()
    clock.advance(100)

    scene.trigger = Rect.from_xywh(450, 30, 100, 20)
    scene.resize.notify()

    assert scene.renders[-1].placement == "bottom"
    assert scene.renders[-1].is_open is True


def test_resize_ignored_while_closed(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    scene.resize.notify()
    assert scene.renders == []
    assert scene.popover.resolved is None


def test_redundant_passes_publish_once(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    scene.popover.open()
    clock.advance(100)
    count = len(scene.renders)
    scene.resize.notify()
    scene.resize.notify()
    assert len(scene.renders) == count


def test_motion_observer_only_with_trigger_tracking(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    assert scene.motion.subscriber_count == 0
    assert scene.resize.subscriber_count == 1

    tracked = Scene(clock, PopoverSettings(consider_trigger_motion=True))
    assert tracked.motion.subscriber_count == 1
    tracked.popover.open()
    clock.advance(100)
    tracked.trigger = Rect.from_xywh(20, 400, 30, 20)
    tracked.motion.notify()
    assert tracked.renders[-1].placement == "topLeft"


def test_destroy_detaches_observers_and_timers(clock) -> None:
    scene = Scene(clock, PopoverSettings(consider_trigger_motion=True))
    scene.popover.open()
    scene.popover.destroy()

    assert clock.pending_count == 0
    assert scene.resize.subscriber_count == 0
    assert scene.motion.subscriber_count == 0
    assert scene.popover.state is VisibilityState.DESTROYED


def test_controlled_initial_value_applied_on_construction(clock) -> None:
    scene = Scene(clock, PopoverSettings(controlled=True, is_open=True))
    assert scene.popover.state is VisibilityState.PENDING_MEASUREMENT
    clock.advance(100)
    assert scene.popover.is_open

    scene.popover.set_external_open(False)
    assert scene.renders[-1].is_open is False


def test_uncontrolled_initial_open(clock) -> None:
    scene = Scene(clock, PopoverSettings(is_open=True))
    clock.advance(100)
    assert scene.popover.is_open


def test_dispatch_and_toggle_through_facade(clock) -> None:
    scene = Scene(clock, PopoverSettings(trigger="click"))
    scene.popover.dispatch(PopoverEvent("click"))
    clock.advance(100)
    assert scene.popover.is_open
    scene.popover.dispatch(PopoverEvent("pointerDown"))
    assert not scene.popover.is_open
    scene.popover.toggle()
    assert scene.popover.is_open
    scene.popover.close()
    assert not scene.popover.is_open


def test_render_state_before_any_pass(clock) -> None:
    scene = Scene(clock, PopoverSettings(placement="rightTop"))
    state = scene.popover.render_state()
    assert state == RenderState(is_open=False, placement="rightTop", style=None)


def test_refresh_content_remeasures_open_popover(clock) -> None:
    scene = Scene(clock, PopoverSettings())
    scene.popover.open()
    clock.advance(100)

    scene.content = ContentDimensions(width=300, height=50)
    scene.popover.refresh_content()

    assert scene.tracker.content_dimensions == scene.content
    assert scene.renders[-1].is_open is True
    assert scene.renders[-1].style.style["left"] == pytest.approx(350)


def test_refresh_content_while_closed_gates_next_open(clock) -> None:
    scene = Scene(clock, PopoverSettings(), measure_sync=False)
    scene.tracker.report(CONTENT)
    scene.popover.refresh_content()
    assert scene.tracker.content_dimensions is None

    scene.popover.open()
    assert scene.popover.state is VisibilityState.PENDING_MEASUREMENT

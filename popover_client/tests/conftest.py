from __future__ import annotations

import os
from typing import Callable, Dict, List, Tuple

import pytest


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


class VirtualClock:
    """Deterministic ``after``/``after_cancel`` pair driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.scheduled: List[Tuple[int, int]] = []
        self.cancelled: List[int] = []
        self._pending: Dict[int, Tuple[float, Callable[[], None]]] = {}
        self._next_handle = 1

    def after(self, ms: int, cb: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = (self.now + ms, cb)
        self.scheduled.append((handle, ms))
        return handle

    def after_cancel(self, handle: object) -> None:
        self.cancelled.append(handle)  # type: ignore[arg-type]
        self._pending.pop(handle, None)  # type: ignore[arg-type]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def advance(self, ms: float) -> None:
        target = self.now + ms
        while True:
            due = [(when, handle) for handle, (when, _cb) in self._pending.items() if when <= target]
            if not due:
                break
            when, handle = min(due)
            _when, cb = self._pending.pop(handle)
            self.now = when
            cb()
        self.now = target


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()

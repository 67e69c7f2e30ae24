from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

_LOGGER = logging.getLogger("ModernPopover.Client.timers")

OPEN_KEY = "open"
CLOSE_KEY = "close"
SETTLE_KEY = "settle"


class PopoverTimers:
    """Owns keyed one-shot timers for a single popover instance.

    Scheduling a key cancels the pending timer of the same key; callers decide
    which other keys a new schedule supersedes.
    """

    def __init__(self, *, after: AfterFn, after_cancel: AfterCancelFn) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self._handles: Dict[str, object] = {}

    def schedule(self, key: str, delay_ms: float, callback: Callable[[], None]) -> object:
        self.cancel(key)
        handle_box: list[object] = [None]

        def fire() -> None:
            # A host may still run a callback it was asked to cancel.
            if self._handles.get(key) is not handle_box[0]:
                return
            self._handles.pop(key, None)
            callback()

        handle = self._after(max(0, int(delay_ms)), fire)
        handle_box[0] = handle
        self._handles[key] = handle
        return handle

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        try:
            self._after_cancel(handle)
        except Exception as exc:
            _LOGGER.debug("Failed to cancel %s timer: %s", key, exc)
        return True

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)

    def pending(self, key: Optional[str] = None) -> bool:
        if key is None:
            return bool(self._handles)
        return key in self._handles

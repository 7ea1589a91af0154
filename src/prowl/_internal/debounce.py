"""Trailing-edge debouncer.

Collects items and delivers them as one batch once no new item has
arrived for ``delay`` seconds. Timers are daemon threads.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("prowl.watch")


class Debouncer:
    """Coalesce bursts of ``push()`` calls into single ``callback(batch)`` calls.

    Items are de-duplicated by key, keeping the most recent item per key
    and the order in which keys first appeared.
    """

    __slots__ = ("_callback", "_delay", "_key", "_lock", "_pending", "_timer")

    def __init__(
        self,
        delay: float,
        callback: Callable[[list[Any]], None],
        key: Callable[[Any], Any] = lambda item: item,
    ) -> None:
        self._delay = delay
        self._callback = callback
        self._key = key
        self._lock = threading.Lock()
        self._pending: dict[Any, Any] = {}
        self._timer: threading.Timer | None = None

    def push(self, item: Any) -> None:
        with self._lock:
            self._pending[self._key(item)] = item
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Deliver pending items now."""
        with self._lock:
            batch = list(self._pending.values())
            self._pending.clear()
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
        if not batch:
            return
        try:
            self._callback(batch)
        except Exception:
            logger.exception("Debounced callback failed")

    def cancel(self) -> None:
        """Drop pending items without delivering them."""
        with self._lock:
            self._pending.clear()
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None

"""Debounce keystroke-driven work on the running event loop."""

import asyncio
from typing import Any, Awaitable, Callable, Optional


class DebounceHandle:
    """Pending debounced call; ``cancel()`` prevents it from running."""

    def __init__(self, timer: asyncio.TimerHandle):
        self._timer = timer
        self.task: Optional[asyncio.Task] = None

    def cancel(self) -> None:
        self._timer.cancel()
        if self.task is not None and not self.task.done():
            self.task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._timer.cancelled()


class Debouncer:
    """Run only the latest of a burst of calls, ``delay`` seconds after the burst.

    Each ``call`` cancels the previously scheduled one. The callback is a
    coroutine function; it runs as a task on the loop that scheduled it.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._pending: Optional[DebounceHandle] = None

    def call(self, func: Callable[..., Awaitable[Any]], *args: Any) -> DebounceHandle:
        self.cancel()
        loop = asyncio.get_running_loop()
        handle: DebounceHandle

        def _fire() -> None:
            handle.task = loop.create_task(func(*args))

        handle = DebounceHandle(loop.call_later(self.delay, _fire))
        self._pending = handle
        return handle

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

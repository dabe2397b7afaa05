from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Wall clock plus one-shot and repeating timers.

    Armed callbacks may fire arbitrarily late while the host is suspended, so
    callers must re-derive state from ``now_ms()`` instead of trusting timer
    punctuality.
    """

    def now_ms(self) -> int: ...

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class _RepeatingTimer:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_ms: int,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval_ms / 1000
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Scheduler backed by the running event loop and the system clock."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(max(delay_ms, 0) / 1000, callback)

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return _RepeatingTimer(self.loop, interval_ms, callback)

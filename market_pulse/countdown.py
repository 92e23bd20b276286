"""Cooldown countdown: a two-state timer ticking once per second off the wall clock."""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Callable

from market_pulse.utils.logger import get_logger

logger = get_logger()

_HOUR_MS = 60 * 60 * 1000
_MINUTE_MS = 60 * 1000


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)


def format_remaining(diff_ms: int) -> str:
    """Render a positive duration as ``{h}h {m}m {s}s``."""
    hours = diff_ms // _HOUR_MS
    minutes = (diff_ms % _HOUR_MS) // _MINUTE_MS
    seconds = (diff_ms % _MINUTE_MS) // 1000
    return f"{hours}h {minutes}m {seconds}s"


class TimerState(str, Enum):
    INACTIVE = "inactive"
    COUNTING = "counting"


class Countdown:
    """Tracks the next-allowed-refresh deadline and renders the time left.

    Inside a running event loop, setting a deadline starts a periodic tick
    task that reports the rendered text to ``on_tick``. Outside a loop,
    callers drive it with :meth:`tick`.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        interval: float = 1.0,
        on_tick: Callable[[str], None] | None = None,
    ):
        self.clock = clock
        self.interval = interval
        self.on_tick = on_tick
        self.deadline: int | None = None
        self.text = ""
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> TimerState:
        return TimerState.COUNTING if self.deadline is not None else TimerState.INACTIVE

    def set_deadline(self, deadline: int) -> None:
        self.deadline = deadline
        self.tick()
        if self.deadline is not None:
            self._start()

    def clear(self) -> None:
        self.deadline = None
        self.text = ""
        self._stop()

    def tick(self) -> str:
        """Recompute the display; an elapsed deadline clears itself."""
        if self.deadline is None:
            self.text = ""
            return self.text
        diff = self.deadline - self.clock()
        if diff <= 0:
            self.deadline = None
            self.text = ""
        else:
            self.text = format_remaining(diff)
        return self.text

    def close(self) -> None:
        self._stop()

    def _start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._task = loop.create_task(self._run())

    def _stop(self) -> None:
        if self._task is not None and not self._task.done():
            current = None
            try:
                current = asyncio.current_task()
            except RuntimeError:
                pass
            if self._task is not current:
                self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while self.deadline is not None:
            await asyncio.sleep(self.interval)
            text = self.tick()
            if self.on_tick is not None:
                self.on_tick(text)
        logger.debug("Countdown finished")

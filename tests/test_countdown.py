"""Tests for the cooldown countdown."""

import asyncio

from conftest import FakeClock

from market_pulse.countdown import Countdown, TimerState, format_remaining

HOUR = 60 * 60 * 1000


def test_format_remaining():
    """Remaining time renders as hours, minutes, seconds."""
    assert format_remaining(3 * HOUR - 1000) == "2h 59m 59s"
    assert format_remaining(61_500) == "0h 1m 1s"
    assert format_remaining(999) == "0h 0m 0s"


def test_starts_inactive():
    """A new countdown has no deadline and no text."""
    countdown = Countdown(clock=FakeClock())
    assert countdown.state == TimerState.INACTIVE
    assert countdown.tick() == ""


def test_set_deadline_starts_counting():
    """Setting a future deadline starts counting."""
    clock = FakeClock()
    countdown = Countdown(clock=clock)
    countdown.set_deadline(clock.now + 3 * HOUR)
    assert countdown.state == TimerState.COUNTING
    assert countdown.text == "3h 0m 0s"

    clock.advance(1000)
    assert countdown.tick() == "2h 59m 59s"


def test_elapsed_deadline_clears_itself():
    """The countdown goes inactive once the deadline passes."""
    clock = FakeClock()
    countdown = Countdown(clock=clock)
    countdown.set_deadline(clock.now + 2000)
    clock.advance(2000)
    assert countdown.tick() == ""
    assert countdown.deadline is None
    assert countdown.state == TimerState.INACTIVE


def test_past_deadline_never_counts():
    """A deadline already in the past is ignored."""
    clock = FakeClock()
    countdown = Countdown(clock=clock)
    countdown.set_deadline(clock.now - 1)
    assert countdown.state == TimerState.INACTIVE


def test_clock_moving_backwards_is_reflected():
    """Remaining time grows if the clock goes back."""
    clock = FakeClock()
    countdown = Countdown(clock=clock)
    countdown.set_deadline(clock.now + HOUR)
    clock.advance(-HOUR)
    assert countdown.tick() == "2h 0m 0s"


def test_clear():
    """clear drops the deadline and text."""
    clock = FakeClock()
    countdown = Countdown(clock=clock)
    countdown.set_deadline(clock.now + HOUR)
    countdown.clear()
    assert countdown.state == TimerState.INACTIVE
    assert countdown.text == ""


def test_tick_task_runs_until_deadline():
    """The tick task reports each second until the deadline."""
    clock = FakeClock()
    ticks = []

    def on_tick(text):
        ticks.append(text)
        clock.advance(1000)

    async def scenario():
        countdown = Countdown(clock=clock, interval=0.001, on_tick=on_tick)
        countdown.set_deadline(clock.now + 3000)
        for _ in range(200):
            if countdown.state == TimerState.INACTIVE:
                break
            await asyncio.sleep(0.001)
        return countdown

    countdown = asyncio.run(scenario())
    assert countdown.state == TimerState.INACTIVE
    assert ticks[0] == "0h 0m 3s"
    assert ticks[-1] == ""


def test_clear_cancels_tick_task():
    """clear cancels the running tick task."""
    clock = FakeClock()

    async def scenario():
        countdown = Countdown(clock=clock, interval=0.001)
        countdown.set_deadline(clock.now + HOUR)
        task = countdown._task
        assert task is not None
        countdown.clear()
        await asyncio.sleep(0.01)
        return task

    task = asyncio.run(scenario())
    assert task.cancelled()

"""Tests for the TimerRegistry."""

import asyncio

import pytest

from anm_bot.services.timers import TimerRegistry


def _recorder(calls: list, label: str):
    async def action(key: str, generation: int) -> None:
        calls.append((label, key, generation))

    return action


@pytest.mark.asyncio
async def test_pair_fires_warning_then_reset():
    timers = TimerRegistry(warning_delay=0.05, reset_delay=0.05)
    calls: list = []

    pair = timers.arm("a", _recorder(calls, "warning"), _recorder(calls, "reset"))
    await asyncio.sleep(0.2)
    await timers.wait_idle()

    assert calls == [("warning", "a", pair.generation), ("reset", "a", pair.generation)]


@pytest.mark.asyncio
async def test_rearm_cancels_previous_pair():
    timers = TimerRegistry(warning_delay=0.05, reset_delay=0.05)
    calls: list = []

    first = timers.arm("a", _recorder(calls, "warning"), _recorder(calls, "reset"))
    second = timers.arm("a", _recorder(calls, "warning"), _recorder(calls, "reset"))

    assert second.generation != first.generation
    assert timers.armed_count == 1
    assert not timers.is_current("a", first.generation)
    assert timers.is_current("a", second.generation)

    await asyncio.sleep(0.2)
    await timers.wait_idle()
    assert {generation for _, _, generation in calls} == {second.generation}


@pytest.mark.asyncio
async def test_cancel_and_cancel_all():
    timers = TimerRegistry(warning_delay=0.05, reset_delay=0.05)
    calls: list = []

    for key in ("a", "b", "c"):
        timers.arm(key, _recorder(calls, "warning"), _recorder(calls, "reset"))
    timers.cancel("a")
    assert not timers.is_armed("a")
    assert timers.armed_count == 2

    timers.cancel_all()
    assert timers.armed_count == 0

    await asyncio.sleep(0.15)
    assert calls == []


@pytest.mark.asyncio
async def test_keys_are_independent():
    timers = TimerRegistry(warning_delay=0.05, reset_delay=10)
    calls: list = []

    timers.arm("a", _recorder(calls, "warning"), _recorder(calls, "reset"))
    timers.arm("b", _recorder(calls, "warning"), _recorder(calls, "reset"))
    timers.arm("a", _recorder(calls, "warning"), _recorder(calls, "reset"))

    await asyncio.sleep(0.12)
    await timers.wait_idle()

    assert sorted(key for _, key, _ in calls) == ["a", "b"]
    timers.cancel_all()

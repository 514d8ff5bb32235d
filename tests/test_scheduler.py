"""Timer ownership: recurring feeds and one-shot callbacks."""

import asyncio

import pytest

from scheduler import FeedScheduler
from conftest import wait_until


@pytest.mark.asyncio
async def test_feed_ticks_until_stopped():
    ticks = []
    sched = FeedScheduler()
    sched.register("price", 0.002, lambda: ticks.append(1))
    assert sched.start("price")
    assert not sched.start("price")
    await wait_until(lambda: len(ticks) >= 3)

    assert sched.stop("price")
    assert not sched.stop("price")
    count = len(ticks)
    await asyncio.sleep(0.02)
    assert len(ticks) == count
    assert not sched.running("price")


@pytest.mark.asyncio
async def test_tick_returning_false_ends_loop():
    calls = []

    def tick():
        calls.append(1)
        return len(calls) < 3

    sched = FeedScheduler()
    sched.register("optimizer", 0.001, tick)
    sched.start("optimizer")
    await wait_until(lambda: not sched.running("optimizer"))
    assert len(calls) == 3
    # can be started again afterwards
    assert sched.start("optimizer")
    await sched.aclose()


@pytest.mark.asyncio
async def test_stop_all_cancels_loops_and_one_shots():
    fired = []
    sched = FeedScheduler()
    sched.register("a", 0.001, lambda: fired.append("a"))
    sched.register("b", 0.001, lambda: fired.append("b"))
    sched.start("a")
    sched.start("b")
    sched.call_later(0.01, lambda: fired.append("late"))
    assert sched.pending == 1

    sched.stop_all()
    sched.stop_all()
    fired.clear()
    await asyncio.sleep(0.03)
    assert fired == []
    assert sched.pending == 0
    assert not sched.running("a") and not sched.running("b")


@pytest.mark.asyncio
async def test_one_shot_fires_once_and_is_forgotten():
    fired = []
    sched = FeedScheduler()
    sched.call_later(0.001, lambda: fired.append(1))
    await wait_until(lambda: fired)
    assert sched.pending == 0
    await asyncio.sleep(0.01)
    assert fired == [1]


@pytest.mark.asyncio
async def test_cancelled_one_shot_never_fires():
    fired = []
    sched = FeedScheduler()
    handle = sched.call_later(0.005, lambda: fired.append(1))
    sched.cancel(handle)
    sched.cancel(None)
    await asyncio.sleep(0.02)
    assert fired == []


def test_unknown_feed_raises():
    sched = FeedScheduler()
    with pytest.raises(KeyError):
        sched.stop("nope")
    with pytest.raises(ValueError):
        sched.register("price", 0, lambda: None)

from __future__ import annotations

import asyncio

import pytest

from songscroll.scheduling import AsyncioScheduler, VirtualScheduler
from songscroll.scroll import ScrollEngine
from songscroll.viewport import SimulatedViewport


def test_call_later_fires_once_when_due() -> None:
    scheduler = VirtualScheduler()
    fired = []

    scheduler.call_later(100, lambda: fired.append(scheduler.now_ms))
    scheduler.advance(99)
    assert fired == []

    scheduler.advance(1)
    assert fired == [100]

    scheduler.advance(1000)
    assert fired == [100]
    assert scheduler.pending() == 0


def test_cancelled_timer_never_fires() -> None:
    scheduler = VirtualScheduler()
    fired = []

    handle = scheduler.call_later(10, lambda: fired.append("late"))
    handle.cancel()
    scheduler.advance(50)

    assert fired == []
    assert scheduler.pending() == 0


def test_repeating_timer_fires_every_interval() -> None:
    scheduler = VirtualScheduler()
    fired = []

    scheduler.call_repeating(16, lambda: fired.append(scheduler.now_ms))
    scheduler.advance(64)

    assert fired == [16, 32, 48, 64]
    assert scheduler.pending() == 1


def test_repeating_timer_cancelled_from_its_callback() -> None:
    scheduler = VirtualScheduler()
    fired = []

    def on_tick() -> None:
        fired.append(scheduler.now_ms)
        if len(fired) == 2:
            handle.cancel()

    handle = scheduler.call_repeating(10, on_tick)
    scheduler.advance(100)

    assert fired == [10, 20]
    assert scheduler.pending() == 0


def test_timers_due_together_fire_in_arming_order() -> None:
    scheduler = VirtualScheduler()
    order = []

    scheduler.call_later(20, lambda: order.append("first"))
    scheduler.call_later(10, lambda: order.append("earlier"))
    scheduler.call_later(20, lambda: order.append("second"))
    scheduler.advance(20)

    assert order == ["earlier", "first", "second"]


def test_timer_armed_from_callback_respects_clock() -> None:
    scheduler = VirtualScheduler()
    fired = []

    scheduler.call_later(10, lambda: scheduler.call_later(5, lambda: fired.append(scheduler.now_ms)))
    scheduler.advance(14)
    assert fired == []

    scheduler.advance(1)
    assert fired == [15]


def test_repeating_interval_must_be_positive() -> None:
    scheduler = VirtualScheduler()

    with pytest.raises(ValueError):
        scheduler.call_repeating(0, lambda: None)


def test_asyncio_call_later_and_cancel() -> None:
    async def scenario() -> list:
        scheduler = AsyncioScheduler()
        fired = []
        scheduler.call_later(5, lambda: fired.append("kept"))
        dropped = scheduler.call_later(5, lambda: fired.append("dropped"))
        dropped.cancel()
        await asyncio.sleep(0.05)
        return fired

    assert asyncio.run(scenario()) == ["kept"]


def test_asyncio_repeating_cancelled_from_callback() -> None:
    async def scenario() -> list:
        scheduler = AsyncioScheduler()
        fired = []

        def on_tick() -> None:
            fired.append(len(fired))
            if len(fired) == 3:
                handle.cancel()

        handle = scheduler.call_repeating(5, on_tick)
        await asyncio.sleep(0.1)
        return fired

    assert asyncio.run(scenario()) == [0, 1, 2]


def test_engine_runs_on_asyncio_loop() -> None:
    async def scenario():
        viewport = SimulatedViewport(page_height=100_000, window_height=800)
        engine = ScrollEngine(viewport, AsyncioScheduler(), speed=10)
        engine.play()
        await asyncio.sleep(0.2)
        moved = viewport.offset
        engine.stop()
        await asyncio.sleep(0.05)
        engine.destroy()
        return moved, viewport.offset, engine.is_active()

    moved, final_offset, active = asyncio.run(scenario())

    assert moved > 0
    assert final_offset == 0
    assert active is False

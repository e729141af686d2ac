"""DebouncedDispatcher 테스트 (지연 시간은 축소해서 사용)"""

import asyncio

import pytest

from storefront_query.engine.debounce import DebouncedDispatcher
from storefront_query.schemas.catalog_schema import QueryIntent


class Recorder:
    def __init__(self, hold: asyncio.Event = None):
        self.fired: list[str] = []
        self.hold = hold

    async def __call__(self, intent: QueryIntent) -> None:
        self.fired.append(intent.text)
        if self.hold is not None:
            await self.hold.wait()


@pytest.mark.asyncio
async def test_burst_collapses_into_single_dispatch():
    """연속 입력은 마지막 의도 하나로 합쳐짐"""
    recorder = Recorder()
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="a"), 80)
    await asyncio.sleep(0.01)
    dispatcher.schedule(QueryIntent(text="ab"), 80)
    await asyncio.sleep(0.01)
    dispatcher.schedule(QueryIntent(text="abc"), 80)

    await dispatcher.wait_idle()

    assert recorder.fired == ["abc"]


@pytest.mark.asyncio
async def test_spaced_inputs_dispatch_each():
    """지연 시간보다 간격이 길면 각각 디스패치"""
    recorder = Recorder()
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="a"), 10)
    await dispatcher.wait_idle()
    dispatcher.schedule(QueryIntent(text="b"), 10)
    await dispatcher.wait_idle()

    assert recorder.fired == ["a", "b"]


@pytest.mark.asyncio
async def test_zero_delay_fires_on_next_loop_turn():
    recorder = Recorder()
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="now"), 0)
    assert dispatcher.has_pending is True

    await dispatcher.wait_idle()

    assert recorder.fired == ["now"]
    assert dispatcher.has_pending is False


@pytest.mark.asyncio
async def test_cancel_prevents_dispatch():
    recorder = Recorder()
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="a"), 50)
    assert dispatcher.cancel() is True
    assert dispatcher.cancel() is False

    await asyncio.sleep(0.08)
    assert recorder.fired == []


@pytest.mark.asyncio
async def test_new_schedule_does_not_cancel_fired_dispatch():
    """이미 실행된 디스패치는 다음 schedule() 이 취소하지 않음"""
    hold = asyncio.Event()
    recorder = Recorder(hold)
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="first"), 0)
    for _ in range(20):
        if recorder.fired:
            break
        await asyncio.sleep(0)
    assert recorder.fired == ["first"]
    assert dispatcher.inflight_count == 1

    dispatcher.schedule(QueryIntent(text="second"), 0)
    hold.set()
    await dispatcher.wait_idle()

    assert recorder.fired == ["first", "second"]
    assert dispatcher.inflight_count == 0


@pytest.mark.asyncio
async def test_callback_error_is_contained():
    """콜백 예외는 로그만 남기고 디스패처를 멈추지 않음"""
    calls = []

    async def failing(intent: QueryIntent) -> None:
        calls.append(intent.text)
        raise RuntimeError("boom")

    dispatcher = DebouncedDispatcher(failing)
    dispatcher.schedule(QueryIntent(text="x"), 0)
    await dispatcher.wait_idle()
    dispatcher.schedule(QueryIntent(text="y"), 0)
    await dispatcher.wait_idle()

    assert calls == ["x", "y"]


@pytest.mark.asyncio
async def test_negative_delay_rejected():
    dispatcher = DebouncedDispatcher(Recorder())
    with pytest.raises(ValueError):
        dispatcher.schedule(QueryIntent(), -1)


@pytest.mark.asyncio
async def test_close_cancels_pending_and_ignores_later_schedules():
    recorder = Recorder()
    dispatcher = DebouncedDispatcher(recorder)

    dispatcher.schedule(QueryIntent(text="a"), 50)
    await dispatcher.close()
    dispatcher.schedule(QueryIntent(text="b"), 0)
    await asyncio.sleep(0.08)

    assert recorder.fired == []
    assert dispatcher.has_pending is False


def test_on_fire_required():
    with pytest.raises(ValueError):
        DebouncedDispatcher(None)

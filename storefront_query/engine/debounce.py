"""Debounced Dispatcher

입력이 잠잠해질 때까지 디스패치를 지연시킵니다.

- schedule() 호출마다 대기 중인 타이머를 취소하고 새 타이머를 시작합니다.
- 취소되지 않고 만료된 타이머만 디스패치를 실행합니다.
- 이미 실행된 디스패치(네트워크 요청)는 취소하지 않습니다.
  오래된 응답은 RequestSequencer 의 세대 비교로 버려집니다.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from storefront_query.core.logging import logger
from storefront_query.schemas.catalog_schema import QueryIntent

DispatchCallback = Callable[[QueryIntent], Awaitable[object]]


class DebouncedDispatcher:
    """asyncio 기반 디바운서

    Usage:
        dispatcher = DebouncedDispatcher(on_fire=run_search)
        dispatcher.schedule(QueryIntent(text="a"), delay_ms=800)
        dispatcher.schedule(QueryIntent(text="ab"), delay_ms=800)  # "a" 는 취소됨
        await dispatcher.wait_idle()
    """

    def __init__(self, on_fire: DispatchCallback):
        if on_fire is None:
            raise ValueError("on_fire must not be None")
        self._on_fire = on_fire
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()
        self._closed = False

    @property
    def has_pending(self) -> bool:
        """만료 대기 중인 타이머가 있는가?"""
        return self._timer is not None and not self._timer.done()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def schedule(self, intent: QueryIntent, delay_ms: int) -> None:
        """디스패치 예약

        이전에 예약된(아직 만료되지 않은) 타이머는 취소됩니다.
        실행 중인 이벤트 루프 안에서 호출해야 합니다.

        Args:
            intent: 디스패치할 의도 (불변 스냅샷)
            delay_ms: 대기 시간 (밀리초)
        """
        if self._closed:
            logger.debug("[DEBOUNCE] schedule ignored: dispatcher closed")
            return
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0: {delay_ms}")

        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_fire(intent, delay_ms))

    def cancel(self) -> bool:
        """대기 중인 타이머 취소

        Returns:
            bool: 취소된 타이머가 있었는지 여부
        """
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done():
            timer.cancel()
            return True
        return False

    async def _wait_then_fire(self, intent: QueryIntent, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)
        if self._timer is not asyncio.current_task():
            return
        self._timer = None

        # 실행된 디스패치는 타이머와 별도로 추적 (cancel() 대상 아님)
        task = asyncio.get_running_loop().create_task(self._run(intent))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, intent: QueryIntent) -> None:
        try:
            await self._on_fire(intent)
        except Exception as e:
            logger.error(f"[DEBOUNCE] dispatch failed: {type(e).__name__}: {e}", exc_info=True)

    async def wait_idle(self) -> None:
        """대기 중인 타이머와 실행 중인 디스패치가 모두 끝날 때까지 대기"""
        while True:
            pending = [t for t in (self._timer, *self._inflight) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """타이머 취소 후 실행 중인 디스패치 완료 대기"""
        self._closed = True
        self.cancel()
        await self.wait_idle()

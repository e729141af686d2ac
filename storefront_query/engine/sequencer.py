"""Request Sequencer

디스패치마다 단조 증가하는 세대(generation)를 부여하고,
응답이 도착했을 때 세대가 여전히 현재인지 판정합니다.

느린 이전 요청의 응답이 빠른 최신 요청의 결과를 덮어쓰지 못하게 하는 유일한 장치입니다.
(last-dispatched-wins)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from storefront_query.core.exceptions import ResponseFormatException
from storefront_query.core.logging import logger
from storefront_query.schemas.catalog_schema import PageMode, PageRequest, PageResult, QueryIntent

PageFetcher = Callable[[PageRequest], Awaitable[PageResult]]


@dataclass(frozen=True)
class SequencedResponse:
    """세대 판정이 끝난 응답

    Attributes:
        request: 원본 요청 (세대 포함)
        result: 성공 시 결과
        error: 실패 시 예외
        stale: 완료 시점에 요청 세대가 현재 세대가 아니었는지 여부
    """

    request: PageRequest
    result: Optional[PageResult] = None
    error: Optional[Exception] = None
    stale: bool = False

    @property
    def is_success(self) -> bool:
        return self.error is None and self.result is not None


class RequestSequencer:
    """세대 기반 요청 순서 관리자

    - REPLACE (새 검색/필터/카테고리/새로고침/최초 마운트): 세대 증가
    - APPEND (더 보기): 현재 세대를 그대로 사용

    dispatch() 는 예외를 던지지 않습니다. 실패는 SequencedResponse.error 로 돌려줍니다.
    """

    def __init__(self, fetch_page: PageFetcher):
        if fetch_page is None:
            raise ValueError("fetch_page must not be None")
        self._fetch_page = fetch_page
        self._generation = 0

    def current_generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def advance(self) -> int:
        """새 세대 시작 (진행 중인 요청은 모두 무효화)"""
        self._generation += 1
        return self._generation

    def stamp(self, intent: QueryIntent, page_number: int, page_size: int, mode: PageMode) -> PageRequest:
        """요청에 세대 부여

        Args:
            intent: 디스패치할 의도
            page_number: 요청 페이지 (1부터)
            page_size: 페이지 크기
            mode: REPLACE 면 세대 증가, APPEND 면 현재 세대 사용

        Returns:
            PageRequest: 세대가 찍힌 요청
        """
        generation = self.advance() if mode == PageMode.REPLACE else self._generation
        return PageRequest(
            intent=intent,
            page_number=page_number,
            page_size=page_size,
            mode=mode,
            generation=generation,
        )

    async def dispatch(self, request: PageRequest) -> SequencedResponse:
        """요청 실행 후 세대 판정

        Args:
            request: stamp() 로 만든 요청

        Returns:
            SequencedResponse: 결과 또는 오류 + stale 여부
        """
        try:
            result = await self._fetch_page(request)
        except Exception as e:
            stale = not self.is_current(request.generation)
            logger.debug(
                f"[SEQUENCER] gen={request.generation} failed: {type(e).__name__} (stale={stale})"
            )
            return SequencedResponse(request=request, error=e, stale=stale)

        if result is None:
            error = ResponseFormatException("page fetcher returned None")
            return SequencedResponse(
                request=request, error=error, stale=not self.is_current(request.generation)
            )

        stale = not self.is_current(request.generation)
        if stale:
            logger.debug(
                f"[SEQUENCER] gen={request.generation} superseded by gen={self._generation}, response discarded"
            )
        return SequencedResponse(request=request, result=result, stale=stale)

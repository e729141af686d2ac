"""Query Orchestrator - Main Engine Entry Point

사용자 입력 흐름을 최소한의, 올바른 순서의 카탈로그 요청으로 바꾸고
응답을 하나의 일관된 결과 목록으로 합칩니다.

    UI 입력 -> FilterNormalizer -> DebouncedDispatcher -> RequestSequencer
            -> (세대 확인) -> PageAccumulator -> QueryStateStore

변경 진입점은 start / set_text / set_filters / select_category /
apply_filter_labels / load_more / refresh / reload_categories 뿐이며,
모든 연산은 예외 대신 DispatchOutcome (또는 CategoryDisplayList) 을 반환합니다.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Optional

from storefront_query.core.config import settings
from storefront_query.core.logging import logger, sanitize_for_log
from storefront_query.engine.accumulator import PageAccumulator
from storefront_query.engine.debounce import DebouncedDispatcher
from storefront_query.engine.error_classifier import ErrorClassifier, ErrorKind
from storefront_query.engine.normalizer import AllPosition, CategoryDisplayList, FilterNormalizer
from storefront_query.engine.result import DispatchOutcome
from storefront_query.engine.sequencer import RequestSequencer, SequencedResponse
from storefront_query.engine.state import QueryStateStore
from storefront_query.schemas.catalog_schema import (
    FilterSet,
    PageMode,
    PageRequest,
    PageResult,
    QueryIntent,
)


class PagedQueryEngine:
    """페이지 단위 조회의 공통 골격

    세대 판정, 적용 직렬화, 실패 정책, 더 보기 가드를 담당합니다.
    검색 화면(QueryOrchestrator)과 홈 피드(HomeFeedOrchestrator)가 공유합니다.
    """

    def __init__(
        self,
        catalog_client,
        page_size: int,
        normalizer: Optional[FilterNormalizer] = None,
        classifier: Optional[ErrorClassifier] = None,
        accumulator: Optional[PageAccumulator] = None,
        store: Optional[QueryStateStore] = None,
    ):
        """
        Args:
            catalog_client: 카탈로그 클라이언트 (get_catalog_page / get_categories 구현)
            page_size: 페이지 크기
            normalizer: 필터/카테고리 정규화기
            classifier: 오류 분류기
            accumulator: 페이지 누적기
            store: 상태 저장소
        """
        if not catalog_client:
            raise ValueError("catalog_client must not be None")
        if page_size <= 0:
            raise ValueError(f"page_size must be positive: {page_size}")

        self.client = catalog_client
        self.page_size = page_size
        self.normalizer = normalizer or FilterNormalizer()
        self.classifier = classifier or ErrorClassifier()
        self.accumulator = accumulator or PageAccumulator()
        self.store = store or QueryStateStore()
        self.sequencer = RequestSequencer(self._fetch_page)

        self._apply_lock = asyncio.Lock()
        self._applied_intent: Optional[QueryIntent] = None

    @property
    def generation(self) -> int:
        return self.sequencer.current_generation()

    async def _fetch_page(self, request: PageRequest) -> PageResult:
        params = self.normalizer.page_params(request)
        return await self.client.get_catalog_page(params)

    def _has_pending_fresh(self) -> bool:
        """아직 실행되지 않은 새 검색이 예약되어 있는가? (하위 클래스에서 재정의)"""
        return False

    def _flags_after(self, mode: PageMode) -> dict[str, bool]:
        if mode == PageMode.APPEND:
            return {"loading_more": False}
        return {"loading": self._has_pending_fresh(), "refreshing": False}

    async def _run_fresh(self, intent: QueryIntent, refreshing: bool = False) -> DispatchOutcome:
        """새 검색 (REPLACE) 실행

        세대를 올리므로 진행 중인 이전 요청(더 보기 포함)은 모두 무효화됩니다.
        """
        request = self.sequencer.stamp(intent, 1, self.page_size, PageMode.REPLACE)
        self.store.update(
            loading=not refreshing,
            refreshing=refreshing,
            loading_more=False,
            error=None,
        )
        logger.info(
            f"[ORCHESTRATOR] fresh dispatch gen={request.generation} "
            f"text='{sanitize_for_log(intent.text)}' refreshing={refreshing}"
        )
        response = await self.sequencer.dispatch(request)
        return await self._commit(response)

    async def _run_append(self) -> DispatchOutcome:
        """더 보기 (APPEND) 실행

        has_more 가 False 이거나 loading/refreshing/loading_more 중 하나라도 True 면 거부합니다.
        """
        snapshot = self.store.snapshot()
        if not snapshot.result_set.has_more:
            logger.debug("[ORCHESTRATOR] load more rejected: no more pages")
            return DispatchOutcome.rejected("no more pages", mode=PageMode.APPEND)
        if snapshot.is_busy:
            logger.debug(
                f"[ORCHESTRATOR] load more rejected: busy (loading={snapshot.loading}, "
                f"refreshing={snapshot.refreshing}, loading_more={snapshot.loading_more})"
            )
            return DispatchOutcome.rejected("request in flight", mode=PageMode.APPEND)

        intent = self._applied_intent or QueryIntent(text=snapshot.text, filters=snapshot.filters)
        request = self.sequencer.stamp(
            intent, snapshot.result_set.page_number + 1, self.page_size, PageMode.APPEND
        )
        self.store.update(loading_more=True)
        logger.debug(f"[ORCHESTRATOR] append dispatch gen={request.generation} page={request.page_number}")
        response = await self.sequencer.dispatch(request)
        return await self._commit(response)

    async def _commit(self, response: SequencedResponse, **extra_changes) -> DispatchOutcome:
        """응답 반영 (직렬화)

        세대 판정은 락 안에서 한 번 더 수행합니다. 오래된 세대의 응답은
        성공/실패와 관계없이 상태를 건드리지 않습니다.
        """
        request = response.request
        async with self._apply_lock:
            if not self.sequencer.is_current(request.generation):
                logger.debug(
                    f"[ORCHESTRATOR] stale response dropped: gen={request.generation}, "
                    f"current={self.sequencer.current_generation()}"
                )
                return DispatchOutcome.stale(request.mode, request.generation)

            current = self.store.result_set

            if response.is_success:
                new_set = self.accumulator.apply(
                    current, response.result, request.mode, requested_page=request.page_number
                )
                if request.mode == PageMode.REPLACE:
                    self._applied_intent = request.intent
                self.store.update(
                    result_set=new_set,
                    error=None,
                    **self._flags_after(request.mode),
                    **extra_changes,
                )
                logger.debug(
                    f"[ORCHESTRATOR] applied gen={request.generation} mode={request.mode.value} "
                    f"page={new_set.page_number} items={len(new_set)} has_more={new_set.has_more}"
                )
                return DispatchOutcome.applied(request.mode, request.generation, new_set)

            classified = self.classifier.classify(response.error)
            new_set = self.accumulator.on_failure(current, request.mode)
            if request.mode == PageMode.REPLACE:
                self._applied_intent = request.intent
            self.store.update(
                result_set=new_set,
                error=classified,
                **self._flags_after(request.mode),
                **extra_changes,
            )
            log = logger.error if classified.kind == ErrorKind.UNKNOWN else logger.warning
            log(
                f"[ORCHESTRATOR] request failed: gen={request.generation} mode={request.mode.value} "
                f"kind={classified.kind.value} code={classified.error_code}"
            )
            return DispatchOutcome.failed(request.mode, request.generation, new_set, classified)


class QueryOrchestrator(PagedQueryEngine):
    """검색 화면 오케스트레이터

    Usage:
        orchestrator = QueryOrchestrator(CatalogApiClient())
        await orchestrator.start()
        orchestrator.set_text("wine")            # 800ms 디바운스
        orchestrator.select_category("wines")    # 600ms 디바운스
        await orchestrator.load_more()
        await orchestrator.refresh()
        await orchestrator.close()
    """

    def __init__(
        self,
        catalog_client,
        page_size: Optional[int] = None,
        text_delay_ms: Optional[int] = None,
        filter_delay_ms: Optional[int] = None,
        all_position: AllPosition = AllPosition.END,
        normalizer: Optional[FilterNormalizer] = None,
        classifier: Optional[ErrorClassifier] = None,
        accumulator: Optional[PageAccumulator] = None,
        store: Optional[QueryStateStore] = None,
    ):
        super().__init__(
            catalog_client,
            page_size=page_size or settings.search_page_size,
            normalizer=normalizer,
            classifier=classifier,
            accumulator=accumulator,
            store=store,
        )
        self.text_delay_ms = settings.debounce_text_ms if text_delay_ms is None else text_delay_ms
        self.filter_delay_ms = settings.debounce_filter_ms if filter_delay_ms is None else filter_delay_ms
        if self.text_delay_ms < 0 or self.filter_delay_ms < 0:
            raise ValueError("debounce delays must be >= 0")
        self.all_position = all_position
        self.dispatcher = DebouncedDispatcher(self._dispatch_scheduled)
        self._category_generation = 0

    def _has_pending_fresh(self) -> bool:
        return self.dispatcher.has_pending

    def _current_intent(self) -> QueryIntent:
        snapshot = self.store.snapshot()
        return QueryIntent(text=snapshot.text, filters=snapshot.filters)

    async def _dispatch_scheduled(self, intent: QueryIntent) -> DispatchOutcome:
        return await self._run_fresh(intent)

    def _schedule(self, delay_ms: int, **changes) -> DispatchOutcome:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.error("[ORCHESTRATOR] schedule rejected: no running event loop")
            return DispatchOutcome.rejected("no running event loop", mode=PageMode.REPLACE)

        self.store.update(loading=True, error=None, **changes)
        self.dispatcher.schedule(self._current_intent(), delay_ms)
        return DispatchOutcome.scheduled()

    # ------------------------------------------------------------------
    # 공개 연산
    # ------------------------------------------------------------------

    async def start(self) -> DispatchOutcome:
        """최초 마운트: 카테고리 로드 후 첫 페이지를 디바운스 없이 바로 요청"""
        self.store.update(loading=True, error=None)
        await self.reload_categories()
        return await self._run_fresh(self._current_intent())

    def set_text(self, text: str) -> DispatchOutcome:
        """검색어 변경 (텍스트 디바운스)

        빈 검색어도 유효한 의도입니다 (필터 없는 전체 목록 요청).
        """
        return self._schedule(self.text_delay_ms, text=text or "")

    def set_filters(self, filters: FilterSet) -> DispatchOutcome:
        """필터 변경 (필터 디바운스)"""
        if filters is None:
            filters = FilterSet()
        return self._schedule(self.filter_delay_ms, filters=filters)

    def select_category(self, category_id: Optional[str]) -> DispatchOutcome:
        """카테고리 선택 ("all" 센티넬은 제약 없음)"""
        category = None if self.normalizer.is_all_category(category_id) else category_id
        return self.set_filters(replace(self.store.filters, category_id=category))

    def apply_filter_labels(
        self,
        price_range_label: Optional[str] = None,
        sort_label: Optional[str] = None,
    ) -> DispatchOutcome:
        """필터 모달의 라벨을 적용 (현재 카테고리는 유지)"""
        filters = self.normalizer.filters_from_labels(
            category_id=self.store.filters.category_id,
            price_range_label=price_range_label,
            sort_label=sort_label,
        )
        return self.set_filters(filters)

    async def load_more(self) -> DispatchOutcome:
        """다음 페이지를 이어 붙임"""
        return await self._run_append()

    async def refresh(self, reload_categories: bool = False) -> DispatchOutcome:
        """당겨서 새로고침

        예약된 디스패치는 취소하고 현재 텍스트/필터로 즉시 첫 페이지를 요청합니다.
        """
        self.dispatcher.cancel()
        self.store.update(refreshing=True, loading=False, error=None)
        if reload_categories:
            await self.reload_categories()
        return await self._run_fresh(self._current_intent(), refreshing=True)

    async def reload_categories(self) -> CategoryDisplayList:
        """카테고리 재조회

        새 목록이 기존 목록을 통째로 교체합니다. 조회 실패나 빈 응답은
        "전체" 만 담긴 degraded 목록으로 대체되며 화면 전체를 실패시키지 않습니다.
        """
        self._category_generation += 1
        generation = self._category_generation

        try:
            raw = await self.client.get_categories()
        except Exception as e:
            classified = self.classifier.classify(e)
            logger.warning(
                f"[ORCHESTRATOR] category load failed: kind={classified.kind.value}, {type(e).__name__}: {e}"
            )
            display = self.normalizer.degraded_display_list(classified)
        else:
            display = self.normalizer.to_category_display_list(raw, self.all_position)

        if generation != self._category_generation:
            logger.debug(f"[ORCHESTRATOR] stale category list dropped: gen={generation}")
            return self.store.snapshot().categories or display

        self.store.update(categories=display)
        return display

    async def wait_idle(self) -> None:
        """예약/진행 중인 디스패치가 모두 끝날 때까지 대기"""
        await self.dispatcher.wait_idle()

    async def close(self) -> None:
        """타이머 정리 (진행 중인 요청은 완료까지 대기)"""
        await self.dispatcher.close()

"""Home Feed Orchestrator

홈 화면 데이터를 한 번에 불러오고 "인기 상품" 목록을 무한 스크롤로 이어 붙입니다.

- 주요 카테고리 (없으면 전체 카테고리를 정렬해 앞에서 N개)
- 할인 상품 N개
- 인기 상품 첫 페이지 (페이지마다 섞어서 표시)
"""

from __future__ import annotations

import asyncio
import random
from typing import Optional

from storefront_query.core.config import settings
from storefront_query.core.logging import logger
from storefront_query.engine.accumulator import PageAccumulator
from storefront_query.engine.error_classifier import ClassifiedError, ErrorClassifier
from storefront_query.engine.normalizer import AllPosition, CategoryDisplayList, FilterNormalizer
from storefront_query.engine.orchestrator import PagedQueryEngine
from storefront_query.engine.result import DispatchOutcome
from storefront_query.engine.shuffle import shuffled
from storefront_query.engine.state import QueryStateStore
from storefront_query.schemas.catalog_schema import (
    CatalogItem,
    PageMode,
    PageRequest,
    PageResult,
    QueryIntent,
)


class HomeFeedOrchestrator(PagedQueryEngine):
    """홈 피드 오케스트레이터

    Usage:
        feed = HomeFeedOrchestrator(CatalogApiClient(), rng=random.Random(42))
        await feed.load()
        await feed.load_more_popular()
        await feed.refresh()
    """

    def __init__(
        self,
        catalog_client,
        page_size: Optional[int] = None,
        offers_limit: Optional[int] = None,
        category_limit: Optional[int] = None,
        all_position: AllPosition = AllPosition.START,
        rng: Optional[random.Random] = None,
        normalizer: Optional[FilterNormalizer] = None,
        classifier: Optional[ErrorClassifier] = None,
        accumulator: Optional[PageAccumulator] = None,
        store: Optional[QueryStateStore] = None,
    ):
        super().__init__(
            catalog_client,
            page_size=page_size or settings.home_page_size,
            normalizer=normalizer,
            classifier=classifier,
            accumulator=accumulator,
            store=store,
        )
        self.offers_limit = offers_limit or settings.home_offers_limit
        self.category_limit = category_limit or settings.home_category_limit
        self.all_position = all_position
        self.rng = rng or random.Random()

    async def _fetch_page(self, request: PageRequest) -> PageResult:
        result = await super()._fetch_page(request)
        return result.model_copy(update={"items": shuffled(result.items, self.rng)})

    async def _load_categories(self) -> CategoryDisplayList:
        try:
            entries = await self.client.get_categories(principal_only=True)
            if not entries:
                logger.warning("[HOME_FEED] no principal categories, falling back to all categories")
                entries = self.normalizer.fallback_categories(
                    await self.client.get_categories(), self.category_limit
                )
        except Exception as e:
            classified = self.classifier.classify(e)
            logger.warning(f"[HOME_FEED] category load failed: {type(e).__name__}: {e}")
            return self.normalizer.degraded_display_list(classified)
        return self.normalizer.to_category_display_list(entries, self.all_position)

    async def _load_offers(self) -> tuple[tuple[CatalogItem, ...], Optional[ClassifiedError]]:
        try:
            items = await self.client.get_offer_items(self.offers_limit)
        except Exception as e:
            classified = self.classifier.classify(e)
            logger.warning(f"[HOME_FEED] offers load failed: {type(e).__name__}: {e}")
            return (), classified
        return tuple(items), None

    async def load(self) -> DispatchOutcome:
        """카테고리/할인 상품/인기 상품 첫 페이지를 동시에 조회"""
        refreshing = self.store.snapshot().refreshing
        request = self.sequencer.stamp(QueryIntent(), 1, self.page_size, PageMode.REPLACE)
        self.store.update(loading=not refreshing, loading_more=False, error=None)
        logger.info(f"[HOME_FEED] load gen={request.generation} refreshing={refreshing}")

        response, categories, (offers, offers_error) = await asyncio.gather(
            self.sequencer.dispatch(request),
            self._load_categories(),
            self._load_offers(),
        )

        outcome = await self._commit(response, categories=categories, offers=offers)
        if outcome.is_applied and offers_error is not None and self.sequencer.is_current(request.generation):
            self.store.update(error=offers_error)
        return outcome

    async def load_more_popular(self) -> DispatchOutcome:
        """인기 상품 다음 페이지 (섞어서 뒤에 추가)"""
        return await self._run_append()

    async def refresh(self) -> DispatchOutcome:
        """당겨서 새로고침"""
        self.store.update(refreshing=True)
        return await self.load()

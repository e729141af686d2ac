"""Filter/Category Normalizer

- UI 필터 라벨 -> FilterSet -> 백엔드 쿼리 파라미터
- 카테고리 원본 목록 -> 표시용 정렬 목록 (+ 합성 "전체" 항목)

센티넬 값("all", RELEVANCE)은 문자열 그대로 백엔드에 보내지 않고 파라미터에서 뺍니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

from storefront_query.core.config import settings
from storefront_query.core.logging import logger
from storefront_query.schemas.catalog_schema import (
    CategoryEntry,
    FilterSet,
    PageRequest,
    SortOrder,
)

if TYPE_CHECKING:
    from storefront_query.engine.error_classifier import ClassifiedError


# 가격대 라벨 -> (최소, 최대) 센트. None 은 제약 없음.
DEFAULT_PRICE_RANGES: dict[str, tuple[Optional[int], Optional[int]]] = {
    "Todos": (None, None),
    "Até R$ 10": (None, 1000),
    "R$ 10-25": (1001, 2500),
    "R$ 25-50": (2501, 5000),
    "Acima de R$ 50": (5001, None),
}

DEFAULT_SORT_LABELS: dict[str, SortOrder] = {
    "Relevância": SortOrder.RELEVANCE,
    "Menor preço": SortOrder.PRICE_ASC,
    "Maior preço": SortOrder.PRICE_DESC,
    "Avaliação": SortOrder.POPULARITY,
    "Nome A-Z": SortOrder.NAME_ASC,
    "Nome Z-A": SortOrder.NAME_DESC,
}


class AllPosition(str, Enum):
    """합성 "전체" 카테고리 위치"""

    START = "start"  # 홈 피드
    END = "end"  # 검색 화면


@dataclass(frozen=True)
class CategoryDisplayList:
    """표시용 카테고리 목록

    Attributes:
        entries: 정렬된 카테고리 + 합성 "전체" 항목 (절대 비어있지 않음)
        degraded: 원본이 비었거나 조회에 실패해 "전체" 만 남은 경우
        error: 조회 실패 시 분류된 오류
    """

    entries: tuple[CategoryEntry, ...]
    degraded: bool = False
    error: Optional["ClassifiedError"] = None

    @property
    def ids(self) -> list[str]:
        return [entry.id for entry in self.entries]

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


def _category_key(entry: CategoryEntry) -> tuple[int, str]:
    return entry.sort_order, entry.name.casefold()


class FilterNormalizer:
    """필터/카테고리 정규화기

    Usage:
        normalizer = FilterNormalizer()
        filters = normalizer.filters_from_labels("wines", "R$ 10-25", "Menor preço")
        params = normalizer.to_request_params(filters)
        # {"categoryId": "wines", "priceMin": "1001", "priceMax": "2500", "sort": "price_asc"}
    """

    def __init__(
        self,
        price_ranges: Optional[Mapping[str, tuple[Optional[int], Optional[int]]]] = None,
        sort_labels: Optional[Mapping[str, SortOrder]] = None,
        all_category_id: Optional[str] = None,
        all_category_label: Optional[str] = None,
    ):
        self.price_ranges = dict(price_ranges if price_ranges is not None else DEFAULT_PRICE_RANGES)
        self.sort_labels = dict(sort_labels if sort_labels is not None else DEFAULT_SORT_LABELS)
        self.all_category_id = all_category_id or settings.category_all_id
        self.all_category_label = all_category_label or settings.category_all_label

    # ------------------------------------------------------------------
    # 필터
    # ------------------------------------------------------------------

    def is_all_category(self, category_id: Optional[str]) -> bool:
        if category_id is None:
            return True
        stripped = category_id.strip()
        return not stripped or stripped == self.all_category_id

    def filters_from_labels(
        self,
        category_id: Optional[str] = None,
        price_range_label: Optional[str] = None,
        sort_label: Optional[str] = None,
    ) -> FilterSet:
        """UI 라벨 조합을 FilterSet 으로 변환

        알 수 없는 라벨은 제약 없음으로 취급합니다.
        """
        price_min: Optional[int] = None
        price_max: Optional[int] = None
        if price_range_label:
            bounds = self.price_ranges.get(price_range_label)
            if bounds is None:
                logger.debug(f"[NORMALIZER] unknown price range label: {price_range_label!r}")
            else:
                price_min, price_max = bounds

        sort_order: Optional[SortOrder] = None
        if sort_label:
            sort_order = self.sort_labels.get(sort_label)
            if sort_order is None:
                logger.debug(f"[NORMALIZER] unknown sort label: {sort_label!r}")

        return FilterSet(
            category_id=None if self.is_all_category(category_id) else category_id,
            price_min=price_min,
            price_max=price_max,
            sort_order=sort_order,
        )

    def to_request_params(self, filters: FilterSet) -> dict[str, str]:
        """FilterSet -> 백엔드 쿼리 파라미터

        "all" 센티넬, RELEVANCE, None 은 파라미터에서 제외합니다.
        """
        params: dict[str, str] = {}
        if not self.is_all_category(filters.category_id):
            params["categoryId"] = filters.category_id.strip()
        if filters.price_min is not None:
            params["priceMin"] = str(filters.price_min)
        if filters.price_max is not None:
            params["priceMax"] = str(filters.price_max)
        if filters.sort_order is not None and filters.sort_order != SortOrder.RELEVANCE:
            params["sort"] = filters.sort_order.value
        return params

    def page_params(self, request: PageRequest) -> dict[str, str]:
        """PageRequest -> 전체 쿼리 파라미터 (텍스트 + 필터 + 페이지)"""
        params = self.to_request_params(request.intent.filters)
        text = request.intent.text.strip()
        if text:
            params["text"] = text
        params["page"] = str(request.page_number)
        params["pageSize"] = str(request.page_size)
        return params

    # ------------------------------------------------------------------
    # 카테고리
    # ------------------------------------------------------------------

    def all_entry(self) -> CategoryEntry:
        return CategoryEntry(
            id=self.all_category_id,
            name=self.all_category_label,
            sort_order=0,
            is_principal=False,
        )

    def sort_categories(self, raw: Iterable[CategoryEntry]) -> list[CategoryEntry]:
        """주요 카테고리 먼저, 각 그룹은 (sort_order, name) 오름차순"""
        entries = [entry for entry in raw if entry.id != self.all_category_id]
        principal = sorted((e for e in entries if e.is_principal), key=_category_key)
        others = sorted((e for e in entries if not e.is_principal), key=_category_key)
        return principal + others

    def to_category_display_list(
        self,
        raw: Iterable[CategoryEntry],
        all_position: AllPosition = AllPosition.END,
    ) -> CategoryDisplayList:
        """표시용 카테고리 목록 생성

        원본이 비어 있어도 "전체" 하나는 항상 포함되며, 이 경우 degraded=True 입니다.
        """
        ordered = self.sort_categories(raw)
        all_entry = self.all_entry()

        if not ordered:
            logger.warning("[NORMALIZER] category source returned no entries, showing 'All' only")
            return CategoryDisplayList(entries=(all_entry,), degraded=True)

        if AllPosition(all_position) == AllPosition.START:
            entries = (all_entry, *ordered)
        else:
            entries = (*ordered, all_entry)
        return CategoryDisplayList(entries=entries)

    def degraded_display_list(self, error: Optional["ClassifiedError"] = None) -> CategoryDisplayList:
        """카테고리 조회 실패 시 "전체" 만 담은 목록"""
        return CategoryDisplayList(entries=(self.all_entry(),), degraded=True, error=error)

    def fallback_categories(self, raw: Iterable[CategoryEntry], limit: int) -> list[CategoryEntry]:
        """주요 카테고리가 없을 때 전체 목록을 정렬해 앞에서 limit 개만 사용 (홈 피드)"""
        entries = [entry for entry in raw if entry.id != self.all_category_id]
        return sorted(entries, key=_category_key)[:limit]

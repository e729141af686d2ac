"""Query State Store

UI 협력자가 읽는 단일 진실 공급원(single source of truth)입니다.

- 현재 텍스트, 필터, 누적 결과, 카테고리, 마지막 오류
- 서로 독립적인 세 플래그: loading / refreshing / loading_more

변경은 오케스트레이터만 update() 로 수행하고, 소비자는 snapshot() 과 subscribe() 를 사용합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from storefront_query.core.logging import logger
from storefront_query.engine.error_classifier import ClassifiedError
from storefront_query.engine.normalizer import CategoryDisplayList
from storefront_query.schemas.catalog_schema import CatalogItem, FilterSet, ResultSet


@dataclass(frozen=True)
class QueryStateSnapshot:
    """특정 시점의 상태 (불변)"""

    text: str = ""
    filters: FilterSet = field(default_factory=FilterSet)
    result_set: ResultSet = field(default_factory=ResultSet.empty)
    categories: Optional[CategoryDisplayList] = None
    offers: tuple[CatalogItem, ...] = ()  # 홈 피드 할인 상품
    error: Optional[ClassifiedError] = None
    loading: bool = False
    refreshing: bool = False
    loading_more: bool = False

    @property
    def is_busy(self) -> bool:
        return self.loading or self.refreshing or self.loading_more

    @property
    def has_more(self) -> bool:
        return self.result_set.has_more

    @property
    def can_load_more(self) -> bool:
        """더 보기 가능 여부 (has_more 이고 진행 중인 요청이 없을 때)"""
        return self.result_set.has_more and not self.is_busy


Listener = Callable[[QueryStateSnapshot], None]

_MUTABLE_FIELDS = frozenset(QueryStateSnapshot.__dataclass_fields__)


class QueryStateStore:
    """상태 저장소

    Usage:
        store = QueryStateStore()
        unsubscribe = store.subscribe(lambda snap: render(snap))
        store.update(loading=True)
        store.snapshot().loading  # True
    """

    def __init__(self, initial: Optional[QueryStateSnapshot] = None):
        self._state = initial or QueryStateSnapshot()
        self._listeners: list[Listener] = []

    def snapshot(self) -> QueryStateSnapshot:
        return self._state

    @property
    def result_set(self) -> ResultSet:
        return self._state.result_set

    @property
    def text(self) -> str:
        return self._state.text

    @property
    def filters(self) -> FilterSet:
        return self._state.filters

    def can_load_more(self) -> bool:
        return self._state.can_load_more

    def update(self, **changes) -> QueryStateSnapshot:
        """상태 변경 후 구독자에게 알림

        Raises:
            AttributeError: 존재하지 않는 필드
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise AttributeError(f"Unknown state fields: {sorted(unknown)}")

        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return self._state
        self._state = new_state
        self._notify()
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """변경 구독

        Returns:
            구독 해제 함수
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                # 구독자 예외는 전파하지 않음
                logger.error(f"[STATE] listener failed: {type(e).__name__}: {e}", exc_info=True)

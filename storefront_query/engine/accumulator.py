"""Page Accumulator

페이지 결과를 누적 결과(ResultSet)에 반영합니다.

- REPLACE: 기존 목록을 버리고 새 페이지를 기준선으로 설치
- APPEND: 기존 목록 뒤에 도착 순서대로 이어 붙임 (중복 ID 제외)
- 같은 페이지를 두 번 APPEND 해도 결과는 한 번과 같음 (멱등)
- has_more 는 매번 result.total_pages 로 다시 계산
"""

from __future__ import annotations

from typing import Iterable, Optional

from storefront_query.core.logging import logger
from storefront_query.schemas.catalog_schema import CatalogItem, PageMode, PageResult, ResultSet


def _dedupe(items: Iterable[CatalogItem], seen: set[str]) -> list[CatalogItem]:
    unique: list[CatalogItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


class PageAccumulator:
    """ResultSet 병합기 (순수 함수 모음)"""

    def apply(
        self,
        current: ResultSet,
        result: PageResult,
        mode: PageMode,
        requested_page: Optional[int] = None,
    ) -> ResultSet:
        """페이지 결과 반영

        중복 판정과 has_more 계산은 요청한 페이지 번호 기준입니다.

        Args:
            current: 현재 누적 결과
            result: 새로 도착한 페이지
            mode: REPLACE | APPEND
            requested_page: 요청한 페이지 번호 (None 이면 응답의 page 사용)

        Returns:
            ResultSet: 새 누적 결과 (current 는 수정하지 않음)
        """
        page = requested_page if requested_page is not None else result.page_number

        if mode == PageMode.REPLACE:
            items = _dedupe(result.items, set())
            return ResultSet(
                items=tuple(items),
                page_number=page,
                has_more=page < result.total_pages,
                total_items=result.total_items,
            )

        if page <= current.page_number:
            # 이미 반영된 페이지: 목록은 그대로 두고 has_more 만 갱신
            logger.debug(
                f"[ACCUMULATOR] duplicate append ignored: page={page}, "
                f"last_applied={current.page_number}"
            )
            return ResultSet(
                items=current.items,
                page_number=current.page_number,
                has_more=current.page_number < result.total_pages,
                total_items=result.total_items,
            )

        appended = _dedupe(result.items, {item.id for item in current.items})
        has_more = page < result.total_pages
        if not result.items:
            # 빈 페이지는 끝으로 간주
            has_more = False

        return ResultSet(
            items=current.items + tuple(appended),
            page_number=page,
            has_more=has_more,
            total_items=result.total_items,
        )

    def on_failure(self, current: ResultSet, mode: PageMode) -> ResultSet:
        """요청 실패 시 누적 결과

        - APPEND 실패: 기존 목록 유지 (목록이 줄어들거나 비지 않음)
        - REPLACE 실패: 빈 목록
        """
        if mode == PageMode.APPEND:
            return current
        return ResultSet.empty()

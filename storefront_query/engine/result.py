"""Dispatch Outcome - Standardized Result Format

오케스트레이터의 모든 공개 연산이 돌려주는 표준 결과 형식입니다.
엔진은 공개 경계 밖으로 예외를 던지지 않고 이 값으로 결과를 알립니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from storefront_query.engine.error_classifier import ClassifiedError
from storefront_query.schemas.catalog_schema import PageMode, ResultSet


class DispatchStatus(str, Enum):
    """디스패치 상태"""

    APPLIED = "applied"  # 현재 세대 응답이 반영됨
    STALE = "stale"  # 이후 디스패치에 밀려 응답이 버려짐
    FAILED = "failed"  # 현재 세대 요청 실패 (오류 노출)
    REJECTED = "rejected"  # 호출 시점에 거부됨 (더 보기 가드 등)
    SCHEDULED = "scheduled"  # 디바운스 예약됨 (아직 요청 전)


@dataclass(frozen=True)
class DispatchOutcome:
    """디스패치 결과

    Attributes:
        status: 결과 상태
        mode: REPLACE | APPEND (예약/거부 시 None 일 수 있음)
        generation: 요청 세대
        result_set: 반영 후 누적 결과 (APPLIED/FAILED)
        error: 분류된 오류 (FAILED)
        reason: 거부 사유 (REJECTED)
    """

    status: DispatchStatus
    mode: Optional[PageMode] = None
    generation: Optional[int] = None
    result_set: Optional[ResultSet] = None
    error: Optional[ClassifiedError] = None
    reason: Optional[str] = None

    @property
    def is_applied(self) -> bool:
        return self.status == DispatchStatus.APPLIED

    @property
    def is_stale(self) -> bool:
        return self.status == DispatchStatus.STALE

    @classmethod
    def applied(cls, mode: PageMode, generation: int, result_set: ResultSet) -> "DispatchOutcome":
        return cls(status=DispatchStatus.APPLIED, mode=mode, generation=generation, result_set=result_set)

    @classmethod
    def stale(cls, mode: PageMode, generation: int) -> "DispatchOutcome":
        return cls(status=DispatchStatus.STALE, mode=mode, generation=generation)

    @classmethod
    def failed(
        cls, mode: PageMode, generation: int, result_set: ResultSet, error: ClassifiedError
    ) -> "DispatchOutcome":
        return cls(
            status=DispatchStatus.FAILED,
            mode=mode,
            generation=generation,
            result_set=result_set,
            error=error,
        )

    @classmethod
    def rejected(cls, reason: str, mode: Optional[PageMode] = None) -> "DispatchOutcome":
        return cls(status=DispatchStatus.REJECTED, mode=mode, reason=reason)

    @classmethod
    def scheduled(cls) -> "DispatchOutcome":
        return cls(status=DispatchStatus.SCHEDULED, mode=PageMode.REPLACE)

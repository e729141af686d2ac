"""테스트 자산(데이터) 레이어

규칙:
- 로직 없음 (단순 dict/list/primitive)
- 엔진/네트워크 의존 없음
"""

from .catalog_payloads import (
    CATALOG_PAGE_PAYLOAD,
    CATEGORY_PAYLOADS,
    ENVELOPED_CATALOG_PAGE_PAYLOAD,
    RATE_LIMIT_ERROR_PAYLOAD,
    SERVER_ERROR_PAYLOAD,
)

__all__ = [
    "CATEGORY_PAYLOADS",
    "CATALOG_PAGE_PAYLOAD",
    "ENVELOPED_CATALOG_PAGE_PAYLOAD",
    "RATE_LIMIT_ERROR_PAYLOAD",
    "SERVER_ERROR_PAYLOAD",
]

"""Error Classifier

전송/서비스 실패를 작은 분류 체계로 변환합니다.

- RATE_LIMITED: HTTP 429 또는 RATE_LIMIT_EXCEEDED. 잠시 후 재시도, 기존 결과 유지
- TRANSPORT: 연결 실패/타임아웃/서비스 오류 응답
- UNKNOWN: 예상하지 못한 응답 형태 (상태 변경 정책은 TRANSPORT 와 동일, 로그는 별도)

classify() 는 절대 예외를 던지지 않습니다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from storefront_query.core.config import settings
from storefront_query.core.exceptions import (
    CatalogApiException,
    RateLimitedException,
    ResponseFormatException,
    StorefrontQueryException,
    TransportException,
)
from storefront_query.core.logging import logger

RATE_LIMIT_CODE = "RATE_LIMIT_EXCEEDED"
TRANSPORT_CODES = frozenset({"NETWORK_ERROR", "CONNECTION_FAILED", "NETWORK_TIMEOUT", "TIMEOUT"})


class ErrorKind(str, Enum):
    """오류 분류"""

    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedError:
    """분류된 오류

    Attributes:
        kind: 분류
        message: 사용자에게 보여줄 메시지
        error_code: 원본 오류 코드 (있으면)
        status: HTTP 상태 코드 (있으면)
        retry_after_s: RATE_LIMITED 일 때 재시도까지 기다릴 시간
    """

    kind: ErrorKind
    message: str
    error_code: Optional[str] = None
    status: Optional[int] = None
    retry_after_s: Optional[float] = None

    @property
    def is_rate_limited(self) -> bool:
        return self.kind == ErrorKind.RATE_LIMITED

    @property
    def is_retryable(self) -> bool:
        """재시도 버튼을 보여줄 만한 오류인가?"""
        return self.kind in (ErrorKind.RATE_LIMITED, ErrorKind.TRANSPORT)


def _field(error: Any, name: str) -> Any:
    """예외 속성 또는 dict 키 조회"""
    if isinstance(error, dict):
        return error.get(name)
    return getattr(error, name, None)


class ErrorClassifier:
    """오류 분류기

    Usage:
        classifier = ErrorClassifier()
        classified = classifier.classify(error)
        if classified.is_rate_limited:
            ...
    """

    def __init__(
        self,
        rate_limit_message: Optional[str] = None,
        rate_limit_backoff_s: Optional[float] = None,
    ):
        self.rate_limit_message = rate_limit_message or settings.rate_limit_message
        self.rate_limit_backoff_s = (
            rate_limit_backoff_s if rate_limit_backoff_s is not None else settings.rate_limit_backoff_s
        )

    def classify(self, error: Any) -> ClassifiedError:
        """오류 분류

        Args:
            error: 예외 객체 또는 {code, message, status} 형태의 dict

        Returns:
            ClassifiedError: 항상 값을 반환 (예외 없음)
        """
        try:
            return self._classify(error)
        except Exception as e:
            logger.error(f"[ERROR_CLASSIFIER] classification failed: {type(e).__name__}: {e}")
            return ClassifiedError(kind=ErrorKind.UNKNOWN, message="Unexpected error")

    def _classify(self, error: Any) -> ClassifiedError:
        status = _field(error, "status")
        if not isinstance(status, int) or isinstance(status, bool):
            status = None
        code = _field(error, "error_code") or _field(error, "code")
        if not isinstance(code, str):
            code = None

        # 1. Rate limit
        if isinstance(error, RateLimitedException) or status == 429 or code == RATE_LIMIT_CODE:
            retry_after = _field(error, "retry_after_s")
            if not isinstance(retry_after, (int, float)) or retry_after < 0:
                retry_after = self.rate_limit_backoff_s
            return ClassifiedError(
                kind=ErrorKind.RATE_LIMITED,
                message=self.rate_limit_message,
                error_code=RATE_LIMIT_CODE,
                status=429 if status is None else status,
                retry_after_s=float(retry_after),
            )

        message = self._message_of(error)

        # 2. Unexpected shape
        if isinstance(error, (ResponseFormatException, ValidationError, KeyError, TypeError, ValueError)):
            logger.error(f"[ERROR_CLASSIFIER] unexpected response shape: {type(error).__name__}: {message}")
            return ClassifiedError(kind=ErrorKind.UNKNOWN, message=message, error_code=code, status=status)

        # 3. Transport / service
        if isinstance(error, (TransportException, CatalogApiException, asyncio.TimeoutError, ConnectionError, OSError)):
            return ClassifiedError(kind=ErrorKind.TRANSPORT, message=message, error_code=code, status=status)

        if code in TRANSPORT_CODES or (status is not None and status >= 400):
            return ClassifiedError(kind=ErrorKind.TRANSPORT, message=message, error_code=code, status=status)

        if isinstance(error, StorefrontQueryException):
            return ClassifiedError(kind=ErrorKind.TRANSPORT, message=message, error_code=code, status=status)

        logger.error(f"[ERROR_CLASSIFIER] unclassified error: {type(error).__name__}: {message}")
        return ClassifiedError(kind=ErrorKind.UNKNOWN, message=message, error_code=code, status=status)

    @staticmethod
    def _message_of(error: Any) -> str:
        message = _field(error, "message")
        if isinstance(message, str) and message:
            return message
        if isinstance(error, BaseException) and str(error):
            return str(error)
        return "Unexpected error"

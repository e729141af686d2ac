"""커스텀 예외 정의 (Structured Exception Hierarchy)

클라이언트 레이어(HTTP/카탈로그)가 발생시키는 예외입니다.
엔진은 이 예외들을 직접 외부로 던지지 않고 ErrorClassifier 로 분류한 값을 반환합니다.
"""
from typing import Any, Optional


# 기본 예외 클래스
class StorefrontQueryException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 카탈로그 API 응답 예외
class CatalogApiException(StorefrontQueryException):
    """카탈로그 API 가 오류 응답을 돌려준 경우

    HTTP 상태 코드와 응답 본문의 {code, message} 를 함께 보관합니다.
    """
    def __init__(
        self,
        message: str,
        status: int,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.status = status
        super().__init__(message, error_code or "CATALOG_API_ERROR", details or {"status": status})


class RateLimitedException(CatalogApiException):
    """요청량 제한 (HTTP 429 / RATE_LIMIT_EXCEEDED)"""
    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after_s: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.retry_after_s = retry_after_s
        super().__init__(
            message,
            status=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=details or {"retry_after_s": retry_after_s},
        )


# 전송 계층 예외
class TransportException(StorefrontQueryException):
    """네트워크/전송 계층 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "TRANSPORT_ERROR", details)


class NetworkTimeoutException(TransportException):
    """네트워크 타임아웃 예외"""
    def __init__(self, operation: str, timeout_s: float, details: Optional[dict[str, Any]] = None):
        message = f"Network timeout during '{operation}' after {timeout_s}s"
        super().__init__(message, "NETWORK_TIMEOUT",
                         details or {"operation": operation, "timeout_s": timeout_s})


class ConnectionFailedException(TransportException):
    """서버 연결 실패"""
    def __init__(self, url: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Could not connect to {url}: {reason}"
        super().__init__(message, "CONNECTION_FAILED", details or {"url": url, "reason": reason})


# 응답 형식 예외
class ResponseFormatException(StorefrontQueryException):
    """응답 본문이 예상한 형태가 아닌 경우"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Unexpected response format: {reason}"
        super().__init__(message, "RESPONSE_FORMAT_ERROR", details or {"reason": reason})


# 유효성 검증 관련 예외
class ValidationException(StorefrontQueryException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                         details or {"field": field, "reason": reason})


class InvalidFilterException(ValidationException):
    """유효하지 않은 필터 값"""
    def __init__(self, field: str, value: Any, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(field, f"{reason} (value: {value})", details)

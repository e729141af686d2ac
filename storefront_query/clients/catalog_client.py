"""Catalog API Client

카탈로그 REST 서비스의 소비자 측 어댑터입니다.

- GET /categories                -> {categories: [...]}
- GET /catalog-items?...         -> {items: [...], pagination: {...}}
- GET /catalog-items/offers      -> {items: [...]}

응답이 {success, data, error} 봉투로 감싸져 오면 벗겨냅니다.
오류 응답은 CatalogApiException / RateLimitedException 으로 변환합니다.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import ValidationError

from storefront_query.clients.http_client import HttpResponse, SharedHttpClient, get_shared_http_client
from storefront_query.core.config import settings
from storefront_query.core.exceptions import (
    CatalogApiException,
    RateLimitedException,
    ResponseFormatException,
)
from storefront_query.core.logging import format_params, logger
from storefront_query.schemas.catalog_schema import CatalogItem, CategoryEntry, PageResult

RATE_LIMIT_CODE = "RATE_LIMIT_EXCEEDED"


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        # HTTP-date 형식은 지원하지 않음
        return None
    return seconds if seconds >= 0 else None


class CatalogApiClient:
    """카탈로그 API 클라이언트

    Usage:
        client = CatalogApiClient()
        page = await client.get_catalog_page({"text": "wine", "page": "1", "pageSize": "20"})
        categories = await client.get_categories()
    """

    def __init__(
        self,
        http_client: Optional[SharedHttpClient] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ):
        self.http = http_client or get_shared_http_client()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.http_timeout_s

    async def get_categories(self, principal_only: bool = False) -> list[CategoryEntry]:
        """카테고리 목록 조회

        Args:
            principal_only: True 면 주요 카테고리만 요청

        Returns:
            list[CategoryEntry]: 백엔드가 돌려준 순서 그대로의 목록
        """
        params = {"principal": "true"} if principal_only else None
        data = await self._get("/categories", params)
        raw = data.get("categories")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ResponseFormatException("'categories' is not a list")
        try:
            return [CategoryEntry.model_validate(entry) for entry in raw]
        except ValidationError as e:
            raise ResponseFormatException(
                "invalid category entry", details={"errors": e.errors()}
            ) from e

    async def get_catalog_page(self, params: Dict[str, str]) -> PageResult:
        """카탈로그 한 페이지 조회

        Args:
            params: FilterNormalizer.page_params() 가 만든 쿼리 파라미터

        Returns:
            PageResult: 상품 목록 + 페이지 정보
        """
        data = await self._get("/catalog-items", params)
        if not isinstance(data.get("items"), list) or not isinstance(data.get("pagination"), dict):
            raise ResponseFormatException("missing 'items' or 'pagination'")
        try:
            return PageResult.from_payload(data)
        except ValidationError as e:
            raise ResponseFormatException(
                "invalid catalog page", details={"errors": e.errors()}
            ) from e

    async def get_offer_items(self, limit: int) -> list[CatalogItem]:
        """할인 상품 조회 (홈 피드)"""
        data = await self._get("/catalog-items/offers", {"limit": str(limit)})
        raw = data.get("items")
        if not isinstance(raw, list):
            raise ResponseFormatException("'items' is not a list")
        try:
            return [CatalogItem.model_validate(item) for item in raw]
        except ValidationError as e:
            raise ResponseFormatException(
                "invalid offer item", details={"errors": e.errors()}
            ) from e

    async def _get(self, path: str, params: Optional[Dict[str, str]]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug(f"[CATALOG_API] GET {path} params={format_params(params)}")
        response = await self.http.get_json(url, params=params, timeout_s=self.timeout_s)

        if not response.ok:
            raise self._error_from_response(path, response)

        return self._unwrap(path, response.payload)

    @staticmethod
    def _unwrap(path: str, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ResponseFormatException(f"{path}: body is not an object")
        # {success, data, error} 봉투
        if payload.get("success") is False:
            error = payload.get("error") if isinstance(payload.get("error"), dict) else {}
            message = error.get("message") or "Request was not successful"
            if error.get("code") == RATE_LIMIT_CODE:
                logger.warning(f"[CATALOG_API] rate limited: path={path} (success=false)")
                raise RateLimitedException(message)
            raise CatalogApiException(message, status=200, error_code=error.get("code"))
        if isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload

    @staticmethod
    def _error_from_response(path: str, response: HttpResponse) -> CatalogApiException:
        body = response.payload if isinstance(response.payload, dict) else {}
        error = body.get("error") if isinstance(body.get("error"), dict) else body
        code = error.get("code") if isinstance(error, dict) else None
        message = (error.get("message") if isinstance(error, dict) else None) or f"HTTP {response.status}"

        if response.status == 429 or code == RATE_LIMIT_CODE:
            retry_after = _parse_retry_after(response.header("Retry-After"))
            logger.warning(f"[CATALOG_API] rate limited: path={path}, retry_after={retry_after}")
            return RateLimitedException(message, retry_after_s=retry_after)

        logger.warning(f"[CATALOG_API] error response: path={path}, status={response.status}, code={code}")
        return CatalogApiException(
            message,
            status=response.status,
            error_code=code,
            details={"status": response.status, "path": path},
        )

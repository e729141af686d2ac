"""공유 HTTP 클라이언트 (curl_cffi)

- 프로세스 단위로 AsyncSession 하나를 재사용합니다.
- 전송 실패는 NetworkTimeoutException / ConnectionFailedException 으로 변환합니다.
  상태 코드 해석은 호출자(CatalogApiClient) 몫입니다.
- 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

from curl_cffi.requests import AsyncSession

from storefront_query.core.config import settings
from storefront_query.core.exceptions import (
    ConnectionFailedException,
    NetworkTimeoutException,
    ResponseFormatException,
)
from storefront_query.core.logging import logger

# libcurl CURLE_OPERATION_TIMEDOUT
_CURL_TIMEOUT_CODE = 28


def _is_timeout(error: Exception) -> bool:
    if isinstance(error, asyncio.TimeoutError):
        return True
    if getattr(error, "code", None) == _CURL_TIMEOUT_CODE:
        return True
    return "timeout" in type(error).__name__.lower() or "timed out" in str(error).lower()


class HttpResponse:
    """상태 코드 + 디코딩된 JSON 본문 + 헤더"""

    __slots__ = ("status", "payload", "headers")

    def __init__(self, status: int, payload: Any, headers: Mapping[str, str]) -> None:
        self.status = status
        self.payload = payload
        self.headers = headers

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._session: Optional[AsyncSession] = None

    async def _ensure_session(self) -> AsyncSession:
        async with self._lock:
            if self._session is not None:
                return self._session
            self._session = AsyncSession(
                impersonate=settings.http_impersonate,
                headers=self.default_headers(),
                allow_redirects=True,
                max_clients=int(getattr(settings, "http_max_clients", 10)),
                trust_env=False,
            )
            return self._session

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.http_user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def get_json(
        self,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        timeout_s: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """GET 요청 후 JSON 본문을 디코딩

        Raises:
            NetworkTimeoutException: 타임아웃
            ConnectionFailedException: 연결 실패 등 전송 오류
            ResponseFormatException: JSON 이 아닌 본문
        """
        timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        sess = await self._ensure_session()
        try:
            resp = await sess.get(url, params=params, headers=headers, timeout=timeout)
        except Exception as e:
            logger.info(f"[HTTP_CLIENT] GET failed: url={url}, {type(e).__name__}: {e!r}")
            if _is_timeout(e):
                raise NetworkTimeoutException(operation=f"GET {url}", timeout_s=timeout) from e
            raise ConnectionFailedException(url=url, reason=f"{type(e).__name__}: {e}") from e

        status = getattr(resp, "status_code", 0) or 0
        text = getattr(resp, "text", "") or ""
        resp_headers = dict(getattr(resp, "headers", None) or {})

        if not text.strip():
            return HttpResponse(status, None, resp_headers)
        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning(f"[HTTP_CLIENT] non-JSON body: url={url}, status={status}")
            raise ResponseFormatException(
                "body is not valid JSON",
                details={"url": url, "status": status},
            ) from e
        return HttpResponse(status, payload, resp_headers)

    async def close(self) -> None:
        async with self._lock:
            if self._session is None:
                return
            try:
                await self._session.close()
            except Exception as e:
                logger.debug(f"[HTTP_CLIENT] close failed: {type(e).__name__}: {e}")
            self._session = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()

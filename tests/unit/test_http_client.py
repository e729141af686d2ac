"""SharedHttpClient 테스트 (curl_cffi AsyncSession 은 patch)"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from storefront_query.clients.http_client import SharedHttpClient
from storefront_query.core.exceptions import (
    ConnectionFailedException,
    NetworkTimeoutException,
    ResponseFormatException,
)


def fake_session(response=None, error=None) -> MagicMock:
    session = MagicMock()
    if error is not None:
        session.get = AsyncMock(side_effect=error)
    else:
        session.get = AsyncMock(return_value=response)
    session.close = AsyncMock()
    return session


def response(status=200, text='{"items": []}', headers=None):
    return SimpleNamespace(
        status_code=status,
        text=text,
        headers=headers or {},
        json=lambda: json.loads(text),
    )


@pytest.mark.asyncio
async def test_get_json_decodes_body_and_headers():
    session = fake_session(response(429, '{"error": {"code": "RATE_LIMIT_EXCEEDED"}}', {"Retry-After": "2"}))
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session):
        client = SharedHttpClient()
        result = await client.get_json("https://api/catalog-items", params={"page": "1"}, timeout_s=2.0)

    assert result.status == 429
    assert result.ok is False
    assert result.payload["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert result.header("retry-after") == "2"
    session.get.assert_awaited_once_with(
        "https://api/catalog-items", params={"page": "1"}, headers=None, timeout=2.0
    )


@pytest.mark.asyncio
async def test_session_is_reused():
    session = fake_session(response())
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session) as factory:
        client = SharedHttpClient()
        await client.get_json("https://api/a")
        await client.get_json("https://api/b")

    assert factory.call_count == 1


@pytest.mark.asyncio
async def test_empty_body_gives_none_payload():
    session = fake_session(response(204, ""))
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session):
        result = await SharedHttpClient().get_json("https://api/a")

    assert result.payload is None
    assert result.ok is True


@pytest.mark.asyncio
async def test_non_json_body():
    session = fake_session(response(502, "<html>Bad gateway</html>"))
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session):
        with pytest.raises(ResponseFormatException):
            await SharedHttpClient().get_json("https://api/a")


@pytest.mark.asyncio
async def test_timeout_is_translated():
    session = fake_session(error=asyncio.TimeoutError())
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session):
        with pytest.raises(NetworkTimeoutException):
            await SharedHttpClient().get_json("https://api/a", timeout_s=1.0)


@pytest.mark.asyncio
async def test_connection_error_is_translated():
    session = fake_session(error=RuntimeError("Failed to connect"))
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session):
        with pytest.raises(ConnectionFailedException):
            await SharedHttpClient().get_json("https://api/a")


@pytest.mark.asyncio
async def test_close_releases_session():
    session = fake_session(response())
    with patch("storefront_query.clients.http_client.AsyncSession", return_value=session) as factory:
        client = SharedHttpClient()
        await client.get_json("https://api/a")
        await client.close()
        await client.close()
        await client.get_json("https://api/a")

    session.close.assert_awaited_once()
    assert factory.call_count == 2

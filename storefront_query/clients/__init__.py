"""Catalog API clients (curl_cffi).

공개 API는 이 파일에서만 export합니다.
"""

from .catalog_client import CatalogApiClient
from .http_client import HttpResponse, SharedHttpClient, get_shared_http_client, shutdown_shared_http_client

__all__ = [
    "CatalogApiClient",
    "HttpResponse",
    "SharedHttpClient",
    "get_shared_http_client",
    "shutdown_shared_http_client",
]

"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Dummy/Fake 주입 (카탈로그 클라이언트)

금지:
- 실제 네트워크 접근
"""

import os
import sys
from pathlib import Path

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fakes import FakeCatalogClient, make_category  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture
def fake_client() -> FakeCatalogClient:
    """주요 카테고리 A, B 와 일반 카테고리 Z 를 가진 클라이언트"""
    return FakeCatalogClient(
        categories=[
            make_category(1, "B", 2, True),
            make_category(2, "A", 1, True),
            make_category(3, "Z", 5, False),
        ]
    )


@pytest.fixture
def gated_client() -> FakeCatalogClient:
    """응답 시점을 테스트가 결정하는 클라이언트"""
    return FakeCatalogClient(categories=[make_category(1, "Wines", 1, True)], gated=True)

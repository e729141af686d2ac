"""Storefront Query Engine

카탈로그 API 를 안전하게 구동하는 클라이언트 측 질의 오케스트레이션 엔진.
"""

__version__ = "1.0.0"

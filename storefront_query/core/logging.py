"""로깅 설정

엔진 로그는 모두 "storefront_query" 로거를 사용하며 메시지는 "[TAG] ..." 형식입니다.
검색어/쿼리 파라미터는 사용자가 직접 입력한 값이므로 sanitize 후에 남깁니다.
"""
import logging
import os
import re
import sys
from typing import Mapping, Optional

from storefront_query.core.config import settings


LOGGER_NAME = "storefront_query"

# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

_PRODUCTION_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
_DEVELOPMENT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

_SENSITIVE_KEYWORDS = ("password", "token", "api_key", "secret")
_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
# 카드/전화번호 등 8자리 이상 숫자열
_LONG_DIGITS_PATTERN = re.compile(r"\d[\d -]{6,}\d")

# 값을 그대로 남겨도 되는 쿼리 파라미터
_SAFE_PARAMS = frozenset({"categoryId", "priceMin", "priceMax", "sort", "page", "pageSize", "principal", "limit"})


def _resolve_level(level: Optional[str] = None) -> int:
    name = (level or settings.log_level).upper()
    if IS_PRODUCTION and name == "DEBUG":
        name = "INFO"
    return getattr(logging, name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """로거 초기화

    여러 번 호출해도 핸들러는 하나만 붙고 레벨만 갱신됩니다.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter(
                fmt=_PRODUCTION_FORMAT if IS_PRODUCTION else _DEVELOPMENT_FORMAT,
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger


logger = setup_logging()


def sanitize_for_log(value: Optional[str], max_length: int = 100) -> str:
    """사용자 입력을 로그에 남기기 전에 정리

    - 줄바꿈 제거
    - 이메일/긴 숫자열 마스킹
    - 민감한 키워드가 있으면 통째로 마스킹
    - 길이 제한

    Args:
        value: 로깅할 문자열
        max_length: 최대 길이

    Returns:
        정리된 문자열
    """
    if not value:
        return "[empty]"

    result = value.replace("\n", " ").replace("\r", " ")
    lowered = result.lower()
    if any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS):
        return "***"

    result = _EMAIL_PATTERN.sub("[email]", result)
    result = _LONG_DIGITS_PATTERN.sub("[number]", result)

    if len(result) > max_length:
        result = result[:max_length] + "..."
    return result


def format_params(params: Optional[Mapping[str, str]]) -> str:
    """쿼리 파라미터를 로그용 문자열로 변환 (자유 입력 값은 sanitize)"""
    if not params:
        return "{}"
    parts = []
    for key, value in params.items():
        shown = value if key in _SAFE_PARAMS else sanitize_for_log(str(value), max_length=40)
        parts.append(f"{key}={shown}")
    return "{" + ", ".join(parts) + "}"

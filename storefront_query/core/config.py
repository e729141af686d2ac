"""설정 관리 - 환경 변수 로드 및 검증"""
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 카탈로그 API
    api_base_url: str = "http://localhost:3000/api"

    # HTTP 클라이언트 (curl_cffi)
    # - http_timeout_s: 단일 요청 타임아웃
    # - http_max_clients: 공유 세션의 동시 커넥션 상한
    http_timeout_s: float = 10.0
    http_impersonate: str = "chrome110"
    http_max_clients: int = 10
    http_user_agent: str = "storefront-query/1.0"

    # 디바운스 (밀리초)
    # 텍스트 입력은 길게, 필터/카테고리 변경은 짧게 대기합니다.
    # NOTE: 텍스트 디바운스를 800ms 아래로 낮추면 백엔드 rate limit 에 걸림
    debounce_text_ms: int = 800
    debounce_filter_ms: int = 600

    # 페이지 크기
    search_page_size: int = 20
    home_page_size: int = 8
    home_offers_limit: int = 4
    home_category_limit: int = 7

    # 카테고리 "전체" 센티넬 (백엔드로 절대 전달하지 않음)
    category_all_id: str = "all"
    category_all_label: str = "All"

    # Rate limit
    rate_limit_message: str = "Too many requests. Please wait a few seconds before trying again."
    rate_limit_backoff_s: float = 5.0

    # 로깅
    log_level: str = "INFO"

    @field_validator("debounce_text_ms", "debounce_filter_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError("debounce delays must be >= 0")
        return v

    @field_validator("search_page_size", "home_page_size", "home_offers_limit", "home_category_limit")
    @classmethod
    def validate_page_sizes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page sizes and limits must be positive")
        return v

    @field_validator("http_timeout_s", "rate_limit_backoff_s")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("category_all_id")
    @classmethod
    def validate_category_all_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("category_all_id must not be empty")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

"""카탈로그 스키마 정의

- 와이어 모델 (pydantic): CatalogItem, CategoryEntry, PageResult
- 엔진 모델 (dataclass): FilterSet, QueryIntent, PageRequest, ResultSet
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront_query.core.exceptions import InvalidFilterException


class SortOrder(str, Enum):
    """정렬 순서

    값은 백엔드로 전달되는 토큰입니다. RELEVANCE 는 기본 정렬이므로 전송하지 않습니다.
    """

    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    POPULARITY = "popularity"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"


class PageMode(str, Enum):
    """페이지 적용 모드"""

    REPLACE = "replace"  # 새 검색 (목록 교체)
    APPEND = "append"  # 더 보기 (목록 뒤에 추가)


def _to_number(value: Any) -> Optional[float]:
    """숫자 또는 숫자 문자열을 양수 float 로 변환 (실패 시 None)"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number <= 0:  # NaN
        return None
    return number


class CatalogItem(BaseModel):
    """카탈로그 상품

    백엔드는 basePrice/finalPrice 를 보내는 경우가 있어 검증 전에 정규화합니다.
    - basePrice -> price
    - finalPrice -> promotional_price (price 보다 작을 때만)
    - basePrice 가 없으면 finalPrice 를 price 로 사용
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="상품 ID")
    name: str = Field("Unnamed product", description="상품명")
    description: str = Field("", description="설명")
    price: float = Field(0, ge=0, description="가격 (센트)")
    promotional_price: Optional[float] = Field(None, alias="promotionalPrice", ge=0, description="할인가 (센트)")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="대표 이미지")
    category_id: Optional[str] = Field(None, alias="categoryId", description="카테고리 ID")
    on_offer: bool = Field(False, alias="onOffer")
    popular: bool = Field(False)
    new: bool = Field(False)

    @model_validator(mode="before")
    @classmethod
    def _normalize_prices(cls, data: Any):
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if data.get("id") is not None:
            data["id"] = str(data["id"])
        if not data.get("name"):
            data.pop("name", None)

        if data.get("basePrice") is not None:
            price = _to_number(data.get("basePrice"))
        else:
            price = _to_number(data.get("price"))

        promotional = None
        if data.get("finalPrice") is not None:
            final_price = _to_number(data.get("finalPrice"))
            if final_price is not None:
                if price is not None and final_price < price:
                    promotional = final_price
                elif price is None:
                    price = final_price
        else:
            promotional = _to_number(data.get("promotionalPrice", data.get("promotional_price")))

        data["price"] = price or 0
        data["promotionalPrice"] = promotional
        data.pop("promotional_price", None)

        if "imageUrl" not in data and "image_url" not in data and data.get("mainImage"):
            data["imageUrl"] = data["mainImage"]
        if data.get("categoryId") is not None:
            data["categoryId"] = str(data["categoryId"])
        return data

    @property
    def effective_price(self) -> float:
        """실제 결제 가격 (할인가 우선)"""
        if self.promotional_price is not None:
            return self.promotional_price
        return self.price


class CategoryEntry(BaseModel):
    """카테고리

    세션당 한 번 (또는 명시적 새로고침 시) 조회되며 제자리에서 수정하지 않습니다.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(...)
    sort_order: int = Field(0, alias="sortOrder")
    is_principal: bool = Field(False, alias="isPrincipal")
    slug: Optional[str] = None
    icon: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_id(cls, data: Any):
        if isinstance(data, dict) and data.get("id") is not None:
            data = dict(data)
            data["id"] = str(data["id"])
        return data


class PageResult(BaseModel):
    """한 페이지 분량의 카탈로그 응답"""

    model_config = ConfigDict(frozen=True)

    items: list[CatalogItem] = Field(default_factory=list)
    page_number: int = Field(1, ge=1)
    page_size: int = Field(0, ge=0)
    total_items: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PageResult":
        """`{items, pagination: {page, pageSize, total, totalPages}}` 를 변환"""
        pagination = payload.get("pagination") or {}
        return cls(
            items=payload.get("items") or [],
            page_number=pagination.get("page", 1),
            page_size=pagination.get("pageSize", 0),
            total_items=pagination.get("total", 0),
            total_pages=pagination.get("totalPages", 0),
        )


@dataclass(frozen=True)
class FilterSet:
    """활성 필터 조합

    category_id 가 "all" 센티넬이면 카테고리 제약이 없다는 뜻입니다.
    가격은 센트 단위 정수입니다.
    """

    category_id: Optional[str] = None
    price_min: Optional[int] = None
    price_max: Optional[int] = None
    sort_order: Optional[SortOrder] = None

    def __post_init__(self):
        for name in ("price_min", "price_max"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidFilterException(name, value, "price bounds must be >= 0")
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise InvalidFilterException(
                "price_min", self.price_min, f"must not exceed price_max ({self.price_max})"
            )


@dataclass(frozen=True)
class QueryIntent:
    """디스패치 시점의 사용자 의도 스냅샷"""

    text: str = ""
    filters: FilterSet = field(default_factory=FilterSet)


@dataclass(frozen=True)
class PageRequest:
    """한 번의 페이지 요청

    generation 은 RequestSequencer 가 디스패치 시점에 부여합니다.
    """

    intent: QueryIntent
    page_number: int
    page_size: int
    mode: PageMode
    generation: int

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1: {self.page_number}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1: {self.page_size}")


@dataclass(frozen=True)
class ResultSet:
    """현재 화면에 보이는 누적 결과

    QueryStateStore 만 소유하며, 현재 세대의 응답에 대해 PageAccumulator 만 새 값을 만듭니다.
    """

    items: tuple[CatalogItem, ...] = ()
    page_number: int = 0
    has_more: bool = False
    total_items: int = 0

    @classmethod
    def empty(cls) -> "ResultSet":
        return cls()

    @property
    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

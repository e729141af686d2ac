"""Wire and engine data models."""

from .catalog_schema import (
    CatalogItem,
    CategoryEntry,
    FilterSet,
    PageMode,
    PageRequest,
    PageResult,
    QueryIntent,
    ResultSet,
    SortOrder,
)

__all__ = [
    "CatalogItem",
    "CategoryEntry",
    "FilterSet",
    "PageMode",
    "PageRequest",
    "PageResult",
    "QueryIntent",
    "ResultSet",
    "SortOrder",
]

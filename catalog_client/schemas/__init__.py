"""Pydantic schemas."""

from .catalog_schema import (
    ApiEnvelope,
    CacheRecord,
    CatalogEntity,
    Dimensions,
    PersistedProduct,
    ProductFormState,
)

__all__ = [
    "ApiEnvelope",
    "CacheRecord",
    "CatalogEntity",
    "Dimensions",
    "PersistedProduct",
    "ProductFormState",
]

"""Services implementation package."""

from .cache_store import LocalCacheStore, get_cache_store
from .catalog_service import CatalogReadResult, CatalogService

__all__ = ["LocalCacheStore", "get_cache_store", "CatalogService", "CatalogReadResult"]

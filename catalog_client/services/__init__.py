"""비즈니스 로직 서비스 - export only."""

from .impl import CatalogReadResult, CatalogService, LocalCacheStore, get_cache_store

__all__ = ["CatalogReadResult", "CatalogService", "LocalCacheStore", "get_cache_store"]

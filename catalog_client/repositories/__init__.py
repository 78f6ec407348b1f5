"""데이터 접근 계층 - export only."""

from .storage import FileStorage, KeyValueStorage, MemoryStorage, RedisStorage, build_storage

__all__ = ["KeyValueStorage", "MemoryStorage", "FileStorage", "RedisStorage", "build_storage"]

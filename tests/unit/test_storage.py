"""저장소 백엔드 단위 테스트."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from catalog_client.core.exceptions import CacheConnectionException
from catalog_client.repositories.storage import (
    FileStorage,
    MemoryStorage,
    RedisStorage,
    build_storage,
)


def test_memory_storage_roundtrip():
    storage = MemoryStorage()
    assert storage.read("k") is None
    storage.write("k", "[]")
    assert storage.read("k") == "[]"


def test_file_storage_missing_key(tmp_path):
    assert FileStorage(str(tmp_path / "cache")).read("localCategories") is None


def test_file_storage_write_creates_directory(tmp_path):
    storage = FileStorage(str(tmp_path / "nested" / "cache"))
    storage.write("localCategories", '[{"id": "a", "name": "b"}]')

    assert (tmp_path / "nested" / "cache" / "localCategories.json").exists()
    assert storage.read("localCategories") == '[{"id": "a", "name": "b"}]'


def test_file_storage_sanitizes_key(tmp_path):
    storage = FileStorage(str(tmp_path))
    storage.write("../evil key", "x")
    assert (tmp_path / ".._evil_key.json").exists()


def test_file_storage_unreadable_raises(tmp_path):
    storage = FileStorage(str(tmp_path))
    (tmp_path / "localCategories.json").mkdir()

    with pytest.raises(CacheConnectionException):
        storage.read("localCategories")


def test_redis_storage_namespaces_keys():
    client = MagicMock()
    client.get = MagicMock(return_value='[{"id": "a"}]')
    storage = RedisStorage("redis://localhost:6379/0", client=client)

    assert storage.read("localCategories") == '[{"id": "a"}]'
    client.get.assert_called_once_with("catalog_client:localCategories")

    storage.write("localCategories", "[]")
    client.set.assert_called_once_with("catalog_client:localCategories", "[]")


def test_redis_storage_errors_become_cache_exceptions():
    client = MagicMock()
    client.get = MagicMock(side_effect=ConnectionError("refused"))
    storage = RedisStorage("redis://localhost:6379/0", client=client)

    with pytest.raises(CacheConnectionException):
        storage.read("localCategories")


def test_redis_storage_requires_url():
    with pytest.raises(ValueError):
        RedisStorage("")


@pytest.mark.parametrize(
    "backend,expected",
    [("memory", MemoryStorage), ("file", FileStorage), ("redis", RedisStorage)],
)
def test_build_storage(backend, expected):
    settings = MagicMock()
    settings.cache_backend = backend
    settings.cache_storage_dir = ".cache"
    settings.redis_url = "redis://localhost:6379/0"

    assert isinstance(build_storage(settings), expected)

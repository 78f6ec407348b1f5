"""키-값 저장소 백엔드 (Local Cache Store 전용)

브라우저 localStorage 와 같은 "문자열 키 → 문자열 값" 저장소를 추상화합니다.
Local Cache Store 만 이 계층에 씁니다.

- MemoryStorage: 테스트/기본값
- FileStorage: 키마다 JSON 파일 하나 (localStorage 대응)
- RedisStorage: 여러 프로세스가 공유하는 배포 환경
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Protocol

from redis import Redis

from catalog_client.core.exceptions import CacheConnectionException
from catalog_client.core.logging import logger


class KeyValueStorage(Protocol):
    """저장소 프로토콜

    read/write 는 접근 불가 시 CacheConnectionException 을 발생시킵니다.
    """

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """프로세스 메모리 저장소"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStorage:
    """디렉터리 기반 저장소 (키 1개 = 파일 1개)"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheConnectionException(f"read {path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise CacheConnectionException(f"write {path}: {e}") from e


class RedisStorage:
    """Redis 저장소

    연결은 첫 접근 시점에 만듭니다 (생성자에서 네트워크 호출 없음).
    """

    def __init__(self, redis_url: str, namespace: str = "catalog_client", client: Optional[Redis] = None):
        if not redis_url and client is None:
            raise ValueError("redis_url must not be empty")
        self.redis_url = redis_url
        self.namespace = namespace
        self._client = client

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            logger.info("[CACHE_STORE] Redis storage initialized")
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def read(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
        except Exception as e:
            raise CacheConnectionException(f"redis get failed: {type(e).__name__}: {e}") from e
        if value is None:
            return None
        return value if isinstance(value, str) else value.decode("utf-8")

    def write(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value)
        except Exception as e:
            raise CacheConnectionException(f"redis set failed: {type(e).__name__}: {e}") from e


def build_storage(settings) -> KeyValueStorage:
    """설정값에 맞는 저장소 생성"""
    backend = settings.cache_backend
    if backend == "file":
        return FileStorage(settings.cache_storage_dir)
    if backend == "redis":
        return RedisStorage(settings.redis_url)
    return MemoryStorage()

"""Local Cache Store - 카탈로그 엔티티 로컬 캐시 (seed 병합)

하나의 저장소 키 아래에 평탄화된 CacheRecord JSON 배열을 보관합니다.

    [{"id": "...", "name": "...", "displayName": "...", "updatedAt": "..."}, ...]

get_all() 은 항상 seed 엔티티를 포함하며, 저장소가 비었거나 손상되어도 예외를 던지지 않습니다.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from catalog_client.core.config import settings
from catalog_client.core.exceptions import CacheException, CacheSerializationException
from catalog_client.core.logging import logger
from catalog_client.core.seeds import SEED_CATEGORIES, is_seed_id
from catalog_client.repositories.storage import KeyValueStorage, MemoryStorage, build_storage
from catalog_client.schemas.catalog_schema import CacheRecord, CatalogEntity


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def seed_entities() -> list[CatalogEntity]:
    """seed 테이블 → CatalogEntity (매 호출마다 새 인스턴스)"""
    entities = []
    for seed in SEED_CATEGORIES:
        entity = CatalogEntity.model_validate(seed)
        entity.is_seed = True
        entities.append(entity)
    return entities


def merge_with_seeds(entities: Iterable[CatalogEntity]) -> list[CatalogEntity]:
    """seed 를 앞에 두고 나머지 엔티티를 순서대로 병합 (seed 필드 우선, id 중복 제거)"""
    merged = seed_entities()
    seen: set[str] = {entity.id for entity in merged}
    for entity in entities:
        if is_seed_id(entity.id) or entity.id in seen:
            continue
        seen.add(entity.id)
        merged.append(entity.model_copy())
    return merged


class LocalCacheStore:
    """로컬 캐시 저장소

    - get_all(): seed ∪ (seed 가 아닌 저장 엔티티)
    - put(entity): id 기준 upsert (last-write-wins)
    - remove(id): seed id 는 no-op
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None, storage_key: str = "localCategories"):
        """
        Args:
            storage: 키-값 저장소 (없으면 메모리 저장소)
            storage_key: 레코드 배열을 보관할 키
        """
        if not storage_key:
            raise ValueError("storage_key must not be empty")
        self.storage = storage if storage is not None else MemoryStorage()
        self.storage_key = storage_key

    def get_all(self) -> list[CatalogEntity]:
        """seed 와 저장 엔티티 병합 (손상 시 seed 만 반환)

        Returns:
            list[CatalogEntity]: seed 먼저, 이어서 저장 순서대로 사용자 엔티티
        """
        try:
            records = self._load_records()
        except CacheException as e:
            logger.warning(f"[CACHE_STORE] storage unreadable, serving seeds only: {e}")
            return seed_entities()
        return merge_with_seeds(record.entity for record in records)

    def get(self, entity_id: str) -> Optional[CatalogEntity]:
        for entity in self.get_all():
            if entity.id == entity_id:
                return entity
        return None

    def put(self, entity: CatalogEntity) -> None:
        """id 기준 upsert

        seed id 와 같은 레코드도 저장은 되지만 get_all() 에서는 seed 필드가 우선합니다.

        Raises:
            CacheException: 저장소에 쓸 수 없는 경우
        """
        self.put_many([entity])

    def put_many(self, entities: Iterable[CatalogEntity]) -> None:
        """여러 엔티티를 한 번의 쓰기로 upsert (네트워크 조회 결과 동기화용)"""
        records = self._load_records_or_empty()
        index = {record.entity.id: i for i, record in enumerate(records)}
        updated_at = _now_iso()

        count = 0
        for entity in entities:
            stored = entity.model_copy()
            stored.is_seed = False
            record = CacheRecord(entity=stored, updated_at=updated_at)
            if entity.id in index:
                records[index[entity.id]] = record
            else:
                index[entity.id] = len(records)
                records.append(record)
            count += 1

        if count == 0:
            return
        self._save_records(records)
        logger.info(f"[CACHE_STORE] upserted {count} record(s) (total={len(records)})")

    def remove(self, entity_id: str) -> None:
        """저장 엔티티 삭제 (seed id 또는 미존재 id 는 no-op)"""
        if is_seed_id(entity_id):
            logger.debug(f"[CACHE_STORE] remove ignored for seed id: {entity_id}")
            return
        records = self._load_records_or_empty()
        remaining = [record for record in records if record.entity.id != entity_id]
        if len(remaining) == len(records):
            return
        self._save_records(remaining)
        logger.info(f"[CACHE_STORE] removed record: {entity_id}")

    def _load_records(self) -> list[CacheRecord]:
        raw = self.storage.read(self.storage_key)
        if raw is None or not raw.strip():
            return []
        try:
            data: Any = json.loads(raw)
        except (json.JSONDecodeError, ValueError, RecursionError) as e:
            raise CacheSerializationException("deserialize", str(e)) from e
        if not isinstance(data, list):
            raise CacheSerializationException("deserialize", f"expected list, got {type(data).__name__}")

        records: list[CacheRecord] = []
        for item in data:
            try:
                records.append(CacheRecord.from_storage(item))
            except (ValidationError, ValueError) as e:
                logger.warning(f"[CACHE_STORE] skipping malformed record: {type(e).__name__}")
        return records

    def _load_records_or_empty(self) -> list[CacheRecord]:
        try:
            return self._load_records()
        except CacheSerializationException as e:
            logger.warning(f"[CACHE_STORE] discarding corrupted storage on write: {e}")
            return []

    def _save_records(self, records: list[CacheRecord]) -> None:
        try:
            payload = json.dumps([record.to_storage() for record in records], ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CacheSerializationException("serialize", str(e)) from e
        self.storage.write(self.storage_key, payload)


_cache_store: Optional[LocalCacheStore] = None


def get_cache_store() -> LocalCacheStore:
    """프로세스 단위 캐시 저장소 (첫 접근 시 생성)"""
    global _cache_store
    if _cache_store is None:
        _cache_store = LocalCacheStore(build_storage(settings), settings.cache_storage_key)
        logger.info(f"[CACHE_STORE] initialized backend={settings.cache_backend}")
    return _cache_store

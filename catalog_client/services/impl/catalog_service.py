"""카탈로그 서비스 - 카테고리 조회(캐시 fallback) / 쓰기 경로

조회: Resilient Executor → 실패(후보 소진/인증 거부) 시 Local Cache Store
쓰기: Resilient Executor → 성공 시 Local Cache Store 갱신 (유일한 명시적 편집 경로)

fallback 데이터를 쓰는 상황은 조용히 넘어가지 않습니다.
결과에 source/fallback_reason 을 싣고, WARNING 로그와 on_fallback 콜백으로 알립니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ValidationError

from catalog_client.core.exceptions import CacheException, RequestException
from catalog_client.core.logging import logger, sanitize_for_log
from catalog_client.engine.endpoints import Operation
from catalog_client.engine.request import RequestSpec
from catalog_client.engine.result import ExecutionResult
from catalog_client.schemas.catalog_schema import CatalogEntity

from .cache_store import LocalCacheStore, merge_with_seeds

SOURCE_NETWORK = "network"
SOURCE_CACHE_FALLBACK = "cache_fallback"

FallbackCallback = Callable[[str, Optional[RequestException]], None]


@dataclass
class CatalogReadResult:
    """카테고리 조회 결과

    Attributes:
        items: 엔티티 목록 (항상 seed 포함)
        source: "network" | "cache_fallback"
        fallback_reason: fallback 사유 (network 이면 None)
        error: fallback 을 유발한 예외
    """

    items: list[CatalogEntity] = field(default_factory=list)
    source: str = SOURCE_NETWORK
    fallback_reason: Optional[str] = None
    error: Optional[RequestException] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_CACHE_FALLBACK


def parse_entities(data: Any) -> list[CatalogEntity]:
    """envelope data → CatalogEntity 목록 (형식이 틀린 항목은 건너뜀)"""
    if isinstance(data, dict):
        data = data.get("categories") or data.get("items") or [data]
    if not isinstance(data, list):
        return []

    entities: list[CatalogEntity] = []
    for item in data:
        try:
            entities.append(CatalogEntity.model_validate(item))
        except ValidationError:
            logger.warning(f"[CATALOG] skipping malformed entity: {str(item)[:80]}")
    return entities


class CatalogService:
    """카테고리 조회/쓰기 서비스"""

    def __init__(
        self,
        executor,
        cache_store: LocalCacheStore,
        admin_token: Optional[str] = None,
        on_fallback: Optional[FallbackCallback] = None,
    ):
        """
        Args:
            executor: ResilientExecutor (resolver 가 설정되어 있어야 함)
            cache_store: 로컬 캐시 저장소
            admin_token: 쓰기 요청용 Bearer 토큰
            on_fallback: fallback 데이터 사용 시 호출 (reason, error)
        """
        if executor is None:
            raise ValueError("executor must not be None")
        if cache_store is None:
            raise ValueError("cache_store must not be None")
        self.executor = executor
        self.cache = cache_store
        self.admin_token = admin_token
        self.on_fallback = on_fallback

    async def list_categories(self) -> CatalogReadResult:
        """카테고리 목록 조회

        성공 시 응답을 캐시에 반영하고, 실패 시 캐시(seed 포함)로 fallback 합니다.
        """
        result = await self.executor.run(Operation.list_categories())

        if result.is_success:
            entities = parse_entities(result.data)
            self._refresh_cache(entities)
            logger.info(f"[CATALOG] categories from network: {len(entities)} item(s) via {result.endpoint}")
            return CatalogReadResult(items=merge_with_seeds(entities), source=SOURCE_NETWORK)

        return self._fallback(result)

    async def create_category(
        self,
        name: str,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CatalogEntity:
        """카테고리 생성 후 캐시에 반영

        Raises:
            ValueError: name 이 비어 있는 경우
            AuthException: 인증 거부
            AggregateRequestException: 모든 후보 실패
        """
        if not name or not name.strip():
            raise ValueError("Category name must not be empty")

        body: dict[str, Any] = {"name": name.strip()}
        if display_name:
            body["displayName"] = display_name
        if description:
            body["description"] = description

        result = await self.executor.run(Operation.create_category(), self._write_spec(body))
        entity = self._expect_entity(result)
        self._cache_put(entity)
        return entity

    async def delete_category(self, category_id: str) -> None:
        """카테고리 삭제 후 캐시에서 제거 (seed 는 캐시에서 지워지지 않음)"""
        result = await self.executor.run(Operation.delete_category(category_id), self._write_spec())
        if not result.is_success:
            raise result.error

        try:
            self.cache.remove(category_id)
        except CacheException as e:
            logger.warning(f"[CATALOG] cache remove failed for {category_id}: {e}")

    def _write_spec(self, body: Optional[dict[str, Any]] = None) -> RequestSpec:
        return RequestSpec(json_body=body, auth_token=self.admin_token)

    def _expect_entity(self, result: ExecutionResult) -> CatalogEntity:
        if not result.is_success:
            raise result.error
        entities = parse_entities(result.data)
        if not entities:
            raise ValueError(f"'{result.operation}' succeeded without an entity in data")
        return entities[0]

    def _refresh_cache(self, entities: list[CatalogEntity]) -> None:
        try:
            self.cache.put_many(entities)
        except CacheException as e:
            logger.warning(f"[CATALOG] cache refresh failed: {e}")

    def _cache_put(self, entity: CatalogEntity) -> None:
        try:
            self.cache.put(entity)
        except CacheException as e:
            logger.warning(f"[CATALOG] cache write failed for {entity.id}: {e}")

    def _fallback(self, result: ExecutionResult) -> CatalogReadResult:
        error = result.error
        reason = str(error) if error else f"{result.operation} failed ({result.status.value})"
        items = self.cache.get_all()

        logger.warning(
            f"[CATALOG] using fallback categories ({len(items)} item(s)); reason: {sanitize_for_log(reason)}"
        )
        if self.on_fallback is not None:
            try:
                self.on_fallback(reason, error)
            except Exception as e:
                logger.error(f"[CATALOG] on_fallback callback failed: {type(e).__name__}: {e}")

        return CatalogReadResult(
            items=items,
            source=SOURCE_CACHE_FALLBACK,
            fallback_reason=reason,
            error=error,
        )

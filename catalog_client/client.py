"""CatalogClient - 조립 루트

설정값으로 resolver / executor / 캐시 저장소 / 서비스 / 폼 세션을 구성합니다.

Usage:
    async with CatalogClient() as client:
        categories = await client.catalog.list_categories()
        with client.product_form() as form:
            form.add_files([RawFile.from_path("sofa.jpg")])
            result = await form.submit(ProductFormState(...))
"""

from __future__ import annotations

from typing import Iterable, Optional

from catalog_client.core.config import Settings, settings as default_settings
from catalog_client.core.logging import logger, mask_token
from catalog_client.engine.endpoints import EndpointResolver
from catalog_client.engine.executor import ResilientExecutor, SleepFunc
from catalog_client.engine.metrics import ExecutorMetrics
from catalog_client.engine.policy import RetryPolicy
from catalog_client.ingestion.pipeline import IngestionPipeline
from catalog_client.ingestion.preview import PreviewRegistry
from catalog_client.ingestion.rules import IngestionConfig
from catalog_client.ingestion.session import UploadSession
from catalog_client.repositories.storage import KeyValueStorage
from catalog_client.services.impl.cache_store import LocalCacheStore, get_cache_store
from catalog_client.services.impl.catalog_service import CatalogService, FallbackCallback
from catalog_client.submission.form import ProductFormSession
from catalog_client.submission.orchestrator import CategoryMissingCallback, SubmissionOrchestrator
from catalog_client.transport.http_client import SharedHttpClient, get_shared_http_client


class CatalogClient:
    """카탈로그 데이터 접근 계층 facade"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[SharedHttpClient] = None,
        storage: Optional[KeyValueStorage] = None,
        sleep: Optional[SleepFunc] = None,
        on_fallback: Optional[FallbackCallback] = None,
        on_category_missing: Optional[CategoryMissingCallback] = None,
    ):
        """
        Args:
            config: 설정 (기본값: 전역 settings)
            http_client: 전송 클라이언트 (기본값: 프로세스 공유 클라이언트)
            storage: 캐시 저장소 백엔드 (기본값: 프로세스 공유 캐시 저장소)
            sleep: backoff 대기 함수 (테스트용)
            on_fallback: 조회가 캐시 fallback 으로 끝났을 때 호출
            on_category_missing: 폼 검증에서 카테고리가 비었을 때 호출
        """
        self.config = config or default_settings
        self.http = http_client or get_shared_http_client()
        self.metrics = ExecutorMetrics()
        self.resolver = EndpointResolver.from_settings(self.config)
        self.executor = ResilientExecutor(
            self.http,
            policy=RetryPolicy.from_settings(self.config),
            resolver=self.resolver,
            metrics=self.metrics,
            sleep=sleep,
        )
        if storage is not None:
            self.cache_store = LocalCacheStore(storage, self.config.cache_storage_key)
        else:
            self.cache_store = get_cache_store()

        self.catalog = CatalogService(
            self.executor,
            self.cache_store,
            admin_token=self.config.admin_token,
            on_fallback=on_fallback,
        )
        self.orchestrator = SubmissionOrchestrator(
            self.executor,
            separate_asset_upload=self.config.separate_asset_upload,
            admin_token=self.config.admin_token,
            on_category_missing=on_category_missing,
        )
        self.ingestion_config = IngestionConfig.from_settings(self.config)

        logger.info(
            f"[CLIENT] ready: {self.resolver!r} two_phase={self.config.separate_asset_upload} "
            f"admin_token={mask_token(self.config.admin_token)}"
        )

    def product_form(
        self,
        product_id: Optional[str] = None,
        existing_images: Optional[Iterable[str]] = None,
        config: Optional[IngestionConfig] = None,
    ) -> ProductFormSession:
        """상품 생성(product_id 없음) 또는 수정 폼 세션"""
        uploads = UploadSession(
            config or self.ingestion_config,
            IngestionPipeline(PreviewRegistry()),
            existing=existing_images,
        )
        return ProductFormSession(self.orchestrator, uploads, product_id=product_id)

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

"""Product Form Session - 폼 인스턴스 하나 (업로드 후보 + 제출 가드)

- 폼당 동시에 하나의 제출만 허용합니다. 진행 중에 다시 submit() 하면 대기/병렬 실행하지 않고 거부합니다.
- 폼을 닫으면(close) 남은 미리보기 핸들을 동기적으로 회수합니다.
"""

from __future__ import annotations

from typing import Iterable, Optional

from catalog_client.core.exceptions import SubmissionInProgressException
from catalog_client.core.logging import logger
from catalog_client.ingestion.files import RawFile
from catalog_client.ingestion.pipeline import IngestResult
from catalog_client.ingestion.session import UploadSession
from catalog_client.schemas.catalog_schema import ProductFormState

from .orchestrator import SubmissionOrchestrator
from .state import SubmissionResult, SubmissionState


class ProductFormSession:
    """상품 생성/수정 폼

    Usage:
        with client.product_form(product_id="abc", existing_images=urls) as form:
            form.add_files([RawFile.from_path("sofa.jpg")])
            result = await form.submit(ProductFormState(...))
    """

    def __init__(
        self,
        orchestrator: SubmissionOrchestrator,
        uploads: UploadSession,
        product_id: Optional[str] = None,
    ):
        self.orchestrator = orchestrator
        self.uploads = uploads
        self.product_id = product_id
        self.last_result: Optional[SubmissionResult] = None
        self._submitting = False

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def state(self) -> SubmissionState:
        if self._submitting:
            return SubmissionState.SUBMITTING_ENTITY
        return self.last_result.state if self.last_result else SubmissionState.IDLE

    def add_files(self, raw_selection: Iterable[RawFile]) -> IngestResult:
        return self.uploads.add(raw_selection)

    def remove_file(self, index: int) -> None:
        self.uploads.remove(index)

    async def submit(self, form: ProductFormState) -> SubmissionResult:
        """폼 제출

        Raises:
            SubmissionInProgressException: 이미 제출이 진행 중인 경우
        """
        if self._submitting:
            logger.warning("[SUBMIT] rejected: submission already in flight")
            raise SubmissionInProgressException({"product_id": self.product_id})

        self._submitting = True
        try:
            result = await self.orchestrator.submit(form, self.uploads.candidates, self.product_id)
        finally:
            self._submitting = False

        self.last_result = result
        if result.is_partial_failure:
            # 재제출은 엔티티 단계만 수행 (에셋 재업로드 금지)
            try:
                self.uploads.promote_uploaded(result.uploaded_refs)
            except ValueError as e:
                # 제출 중 후보가 바뀐 경우: 참조를 후보에 연결할 수 없음
                logger.error(f"[SUBMIT] cannot link uploaded assets to candidates: {e}; refs={result.uploaded_refs}")
        if result.is_success:
            if result.entity is not None and self.product_id is None:
                self.product_id = result.entity.id
            self.uploads.clear()
            if result.entity is not None:
                self.uploads.set_existing(result.entity.images)
        return result

    def close(self) -> None:
        self.uploads.close()

    def __enter__(self) -> "ProductFormSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

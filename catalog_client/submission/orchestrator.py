"""Submission Orchestrator - 상품 create/update 2단계 제출

1. 로컬 검증 (실패 시 네트워크 호출 없이 FAILED)
2. 후보 분리: EXISTING → 참조 문자열, NEW → 바이트
3. (분리 배포) NEW 후보를 에셋 업로드 연산으로 먼저 전송 → 저장 참조로 치환
4. multipart 본문 생성 → 상품 create/update 연산
5. 성공 → SUCCEEDED / 3단계 이후 실패 → PARTIAL_FAILURE

orphan asset 은 자동으로 정리하지 않습니다. PARTIAL_FAILURE 결과의 uploaded_refs 로 보고합니다.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from pydantic import ValidationError

from catalog_client.core.exceptions import (
    AssetUploadException,
    FormValidationException,
    PartialFailureException,
)
from catalog_client.core.logging import logger, sanitize_for_log
from catalog_client.engine.endpoints import Operation
from catalog_client.engine.request import RequestSpec
from catalog_client.engine.result import ExecutionResult
from catalog_client.ingestion.files import CandidateOrigin, UploadCandidate
from catalog_client.schemas.catalog_schema import PersistedProduct, ProductFormState

from .payload import build_asset_payload, build_product_payload, extract_uploaded_refs
from .state import SubmissionResult, SubmissionState, SubmissionStateMachine
from .validation import validate_product_form

CategoryMissingCallback = Callable[[ProductFormState], None]


class SubmissionOrchestrator:
    """상품 제출 오케스트레이터

    Usage:
        orchestrator = SubmissionOrchestrator(executor, separate_asset_upload=True)
        result = await orchestrator.submit(form, session.candidates)
        if result.is_partial_failure:
            notify_operator(result.uploaded_refs)
    """

    def __init__(
        self,
        executor,
        separate_asset_upload: bool = False,
        admin_token: Optional[str] = None,
        on_category_missing: Optional[CategoryMissingCallback] = None,
    ):
        """
        Args:
            executor: ResilientExecutor (resolver 가 설정되어 있어야 함)
            separate_asset_upload: 에셋 업로드를 별도 연산으로 먼저 수행할지
            admin_token: Bearer 토큰 (헤더 + body echo)
            on_category_missing: 카테고리 미선택으로 검증 실패 시 호출 (카테고리 생성 다이얼로그 등)
        """
        if executor is None:
            raise ValueError("executor must not be None")
        self.executor = executor
        self.separate_asset_upload = separate_asset_upload
        self.admin_token = admin_token
        self.on_category_missing = on_category_missing

    async def submit(
        self,
        form: ProductFormState,
        candidates: Sequence[UploadCandidate],
        product_id: Optional[str] = None,
    ) -> SubmissionResult:
        """상품 제출

        Args:
            form: 폼 상태
            candidates: 활성 업로드 후보 (삽입 순서)
            product_id: 수정 대상 ID (없으면 생성)

        Returns:
            SubmissionResult: SUCCEEDED | FAILED | PARTIAL_FAILURE
        """
        machine = SubmissionStateMachine()
        machine.advance(SubmissionState.VALIDATING)

        field_errors = validate_product_form(form)
        if field_errors:
            logger.info(f"[SUBMIT] validation failed: {sorted(field_errors)}")
            if "category" in field_errors and self.on_category_missing is not None:
                self.on_category_missing(form)
            machine.advance(SubmissionState.FAILED)
            return SubmissionResult(
                state=machine.state,
                error=FormValidationException(field_errors),
                field_errors=field_errors,
                history=machine.history,
            )

        ordered = sorted(candidates, key=lambda c: c.sequence_index)
        new_candidates = [c for c in ordered if c.origin == CandidateOrigin.NEW]

        uploaded_refs: list[str] = []
        inline_candidates: list[UploadCandidate] = new_candidates
        if self.separate_asset_upload and new_candidates:
            machine.advance(SubmissionState.UPLOADING_ASSETS)
            uploaded_refs, error = await self._upload_assets(new_candidates)
            if error is not None:
                machine.advance(SubmissionState.FAILED)
                return SubmissionResult(state=machine.state, error=error, history=machine.history)
            machine.advance(SubmissionState.ASSETS_UPLOADED)
            inline_candidates = []

        image_refs = self._merge_refs(ordered, uploaded_refs)
        payload = build_product_payload(form, image_refs, inline_candidates, self.admin_token)
        operation = Operation.update_product(product_id) if product_id else Operation.create_product()

        machine.advance(SubmissionState.SUBMITTING_ENTITY)
        logger.info(
            f"[SUBMIT] {operation.name}: existing={len(image_refs) - len(uploaded_refs)} "
            f"uploaded={len(uploaded_refs)} inline={len(inline_candidates)}"
        )
        result = await self.executor.run(operation, RequestSpec(form=payload, auth_token=self.admin_token))

        if result.is_success:
            machine.advance(SubmissionState.SUCCEEDED)
            logger.info(f"[SUBMIT] {operation.name} succeeded via {result.endpoint}")
            return SubmissionResult(
                state=machine.state,
                entity=self._parse_entity(result),
                uploaded_refs=uploaded_refs,
                history=machine.history,
                response=result.payload,
            )

        if uploaded_refs:
            machine.advance(SubmissionState.PARTIAL_FAILURE)
            logger.error(
                f"[SUBMIT] {operation.name} failed after asset upload; "
                f"{len(uploaded_refs)} orphan asset(s): {uploaded_refs}"
            )
            return SubmissionResult(
                state=machine.state,
                error=PartialFailureException(uploaded_refs, result.error),
                uploaded_refs=uploaded_refs,
                history=machine.history,
            )

        machine.advance(SubmissionState.FAILED)
        logger.warning(f"[SUBMIT] {operation.name} failed: {sanitize_for_log(result.error)}")
        return SubmissionResult(state=machine.state, error=result.error, history=machine.history)

    async def _upload_assets(
        self, new_candidates: list[UploadCandidate]
    ) -> tuple[list[str], Optional[AssetUploadException]]:
        payload = build_asset_payload(new_candidates, self.admin_token)
        result = await self.executor.run(
            Operation.upload_assets(), RequestSpec(form=payload, auth_token=self.admin_token)
        )
        if not result.is_success:
            return [], AssetUploadException(str(result.error), cause=result.error)

        refs = extract_uploaded_refs((result.payload or {}).get("files") or result.data)
        if len(refs) != len(new_candidates):
            # 개수가 다르면 어떤 파일이 어떤 참조인지 알 수 없으므로 연결하지 않음
            logger.error(
                f"[SUBMIT] asset upload returned {len(refs)} reference(s) for "
                f"{len(new_candidates)} file(s): {refs}"
            )
            return [], AssetUploadException(
                f"expected {len(new_candidates)} references, got {len(refs)}",
                details={"returned_refs": refs},
            )
        logger.info(f"[SUBMIT] uploaded {len(refs)} asset(s)")
        return refs, None

    @staticmethod
    def _merge_refs(ordered: list[UploadCandidate], uploaded_refs: list[str]) -> list[str]:
        """후보 순서대로 참조 목록 생성 (NEW 는 업로드된 참조로 치환)"""
        uploaded = iter(uploaded_refs)
        refs: list[str] = []
        for candidate in ordered:
            if candidate.origin == CandidateOrigin.EXISTING:
                refs.append(str(candidate.source_ref))
            elif uploaded_refs:
                refs.append(next(uploaded))
        return refs

    @staticmethod
    def _parse_entity(result: ExecutionResult) -> Optional[PersistedProduct]:
        data = result.data
        if isinstance(data, dict) and isinstance(data.get("product"), dict):
            data = data["product"]
        if not isinstance(data, dict):
            return None
        try:
            return PersistedProduct.model_validate(data)
        except ValidationError:
            logger.warning(f"[SUBMIT] {result.operation} response data has no product id")
            return None

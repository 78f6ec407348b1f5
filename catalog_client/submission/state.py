"""Submission State - 제출 상태 머신 / 결과 형식

    IDLE → VALIDATING → [UPLOADING_ASSETS → ASSETS_UPLOADED →] SUBMITTING_ENTITY → SUCCEEDED

실패 종료:
- FAILED: 검증 실패 또는 아무것도 저장되지 않은 상태에서 요청 실패 (전체 재시도 안전)
- PARTIAL_FAILURE: 에셋은 저장됐지만 엔티티 등록 실패 (전체 재시도 금지, orphan asset)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from catalog_client.core.exceptions import CatalogClientException
from catalog_client.schemas.catalog_schema import PersistedProduct


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING_ASSETS = "uploading_assets"
    ASSETS_UPLOADED = "assets_uploaded"
    SUBMITTING_ENTITY = "submitting_entity"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PARTIAL_FAILURE = "partial_failure"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {SubmissionState.SUCCEEDED, SubmissionState.FAILED, SubmissionState.PARTIAL_FAILURE}
)

ALLOWED_TRANSITIONS: dict[SubmissionState, frozenset[SubmissionState]] = {
    SubmissionState.IDLE: frozenset({SubmissionState.VALIDATING}),
    SubmissionState.VALIDATING: frozenset(
        {SubmissionState.UPLOADING_ASSETS, SubmissionState.SUBMITTING_ENTITY, SubmissionState.FAILED}
    ),
    SubmissionState.UPLOADING_ASSETS: frozenset({SubmissionState.ASSETS_UPLOADED, SubmissionState.FAILED}),
    SubmissionState.ASSETS_UPLOADED: frozenset({SubmissionState.SUBMITTING_ENTITY}),
    SubmissionState.SUBMITTING_ENTITY: frozenset(
        {SubmissionState.SUCCEEDED, SubmissionState.FAILED, SubmissionState.PARTIAL_FAILURE}
    ),
}


class SubmissionStateMachine:
    """상태 전이 추적 (허용되지 않은 전이는 RuntimeError)"""

    def __init__(self):
        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]

    def advance(self, target: SubmissionState) -> SubmissionState:
        allowed = ALLOWED_TRANSITIONS.get(self.state, frozenset())
        if target not in allowed:
            raise RuntimeError(f"Illegal submission transition: {self.state.value} → {target.value}")
        self.state = target
        self.history.append(target)
        return target


@dataclass
class SubmissionResult:
    """Result<PersistedEntity, SubmissionError>

    Attributes:
        state: 종료 상태 (SUCCEEDED | FAILED | PARTIAL_FAILURE)
        entity: 저장된 상품 (성공 시)
        error: 실패 원인 예외
        field_errors: 필드별 검증 오류 (인라인 렌더링용)
        uploaded_refs: 1단계에서 저장된 참조 (PARTIAL_FAILURE 시 orphan 목록)
        history: 거쳐 간 상태
        response: 성공 envelope 원본
    """

    state: SubmissionState
    entity: Optional[PersistedProduct] = None
    error: Optional[CatalogClientException] = None
    field_errors: dict[str, str] = field(default_factory=dict)
    uploaded_refs: list[str] = field(default_factory=list)
    history: list[SubmissionState] = field(default_factory=list)
    response: Optional[dict[str, Any]] = None

    @property
    def is_success(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED

    @property
    def is_partial_failure(self) -> bool:
        return self.state == SubmissionState.PARTIAL_FAILURE

    @property
    def safe_to_retry(self) -> bool:
        """전체 재제출이 안전한지 (FAILED 만 안전)"""
        return self.state == SubmissionState.FAILED

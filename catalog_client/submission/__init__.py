"""Submission - 상품 폼 검증 / payload / 2단계 제출 상태 머신"""

from .form import ProductFormSession
from .orchestrator import SubmissionOrchestrator
from .payload import build_asset_payload, build_product_payload, extract_uploaded_refs
from .state import SubmissionResult, SubmissionState, SubmissionStateMachine
from .validation import ensure_valid, validate_product_form

__all__ = [
    "ProductFormSession",
    "SubmissionOrchestrator",
    "SubmissionResult",
    "SubmissionState",
    "SubmissionStateMachine",
    "build_asset_payload",
    "build_product_payload",
    "extract_uploaded_refs",
    "ensure_valid",
    "validate_product_form",
]

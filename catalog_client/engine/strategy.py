"""Execution Strategy - 응답 분류 및 후보 전환 결정

HTTP 응답/예외를 AttemptOutcome 으로 분류하고,
같은 후보 재시도 / 다음 후보 이동 / 루프 중단 여부를 결정합니다.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from catalog_client.schemas.catalog_schema import ApiEnvelope

from .result import AttemptOutcome

AUTH_STATUS_CODES = frozenset({401, 403})


@dataclass
class Classification:
    """응답 분류 결과"""

    outcome: AttemptOutcome
    envelope: Optional[dict[str, Any]] = None
    message: Optional[str] = None


def _parse_json(body: str) -> Any:
    if not body or not body.strip():
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, ValueError):
        return None


def _extract_message(parsed: Any, body: str, max_length: int = 200) -> Optional[str]:
    if isinstance(parsed, dict):
        msg = parsed.get("message") or parsed.get("error")
        if isinstance(msg, str) and msg:
            return msg[:max_length]
    text = (body or "").strip()
    return text[:max_length] if text else None


class ExecutionStrategy:
    """응답 분류 / 재시도 전략

    Usage:
        strategy = ExecutionStrategy()

        c = strategy.classify_response(resp.status_code, resp.text)
        if strategy.should_abort(c.outcome):
            ...
    """

    @staticmethod
    def classify_response(status_code: int, body: str) -> Classification:
        """HTTP 응답 분류

        - 401/403 → AUTH_ERROR
        - 2xx + {"success": true} → SUCCESS
        - 2xx + 그 외 body (success 누락/false, JSON 아님, 빈 body) → SERVER_ERROR
        - 그 외 상태 코드 → SERVER_ERROR (JSON message 또는 plain text 보존)

        Args:
            status_code: HTTP 상태 코드
            body: 응답 본문 (text)

        Returns:
            Classification: 분류 결과
        """
        parsed = _parse_json(body)

        if status_code in AUTH_STATUS_CODES:
            return Classification(
                outcome=AttemptOutcome.AUTH_ERROR,
                message=_extract_message(parsed, body) or f"HTTP {status_code}",
            )

        if 200 <= status_code < 300:
            if not isinstance(parsed, dict):
                return Classification(
                    outcome=AttemptOutcome.SERVER_ERROR,
                    message="Invalid success envelope: body is not a JSON object",
                )
            try:
                envelope = ApiEnvelope.model_validate(parsed)
            except ValidationError:
                return Classification(
                    outcome=AttemptOutcome.SERVER_ERROR,
                    message="Invalid success envelope: missing boolean 'success'",
                )
            if not envelope.success:
                return Classification(
                    outcome=AttemptOutcome.SERVER_ERROR,
                    message=envelope.message or "Server reported success=false",
                )
            return Classification(outcome=AttemptOutcome.SUCCESS, envelope=parsed)

        return Classification(
            outcome=AttemptOutcome.SERVER_ERROR,
            message=_extract_message(parsed, body) or f"HTTP {status_code}",
        )

    @staticmethod
    def should_retry_same_candidate(outcome: AttemptOutcome) -> bool:
        """같은 후보 재시도 여부 - 전송 실패/타임아웃만 재시도"""
        return outcome == AttemptOutcome.NETWORK_ERROR

    @staticmethod
    def should_abort(outcome: AttemptOutcome) -> bool:
        """루프 전체 중단 여부 - 인증 오류는 후보와 무관하므로 즉시 중단"""
        return outcome == AttemptOutcome.AUTH_ERROR

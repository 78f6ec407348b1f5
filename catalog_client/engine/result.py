"""Execution Result - Standardized Result Format

Resilient Executor 한 번의 호출 결과와 개별 시도(RequestAttempt) 기록을 정의합니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from catalog_client.core.exceptions import (
    AggregateRequestException,
    AuthException,
    RequestException,
)


class AttemptOutcome(str, Enum):
    """개별 시도 결과"""

    SUCCESS = "success"
    NETWORK_ERROR = "network_error"  # 연결 불가/타임아웃 (같은 후보 재시도)
    AUTH_ERROR = "auth_error"  # 401/403 (루프 즉시 중단)
    SERVER_ERROR = "server_error"  # success:false 또는 non-2xx (다음 후보로)


@dataclass
class RequestAttempt:
    """단일 HTTP 시도 기록 (executor 호출 동안만 존재)

    Attributes:
        endpoint: 시도한 URL
        started_at: 시작 시각 (epoch 초)
        outcome: 시도 결과
        attempt_no: 해당 후보에서의 시도 번호 (1부터)
        status_code: HTTP 상태 코드 (전송 실패 시 None)
        message: 서버 메시지 또는 오류 설명
        elapsed_ms: 소요 시간 (밀리초)
        error: 실패 시도의 예외 (NetworkException | ServerException | AuthException)
    """

    endpoint: str
    started_at: float
    outcome: AttemptOutcome
    attempt_no: int = 1
    status_code: Optional[int] = None
    message: Optional[str] = None
    elapsed_ms: Optional[float] = None
    error: Optional[RequestException] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "started_at": self.started_at,
            "outcome": self.outcome.value,
            "attempt_no": self.attempt_no,
            "status_code": self.status_code,
            "message": self.message,
            "elapsed_ms": self.elapsed_ms,
            "error_code": self.error.error_code if self.error else None,
        }


class ExecutionStatus(str, Enum):
    """executor 호출 최종 상태"""

    SUCCESS = "success"
    AUTH_ERROR = "auth_error"
    EXHAUSTED = "exhausted"


@dataclass
class ExecutionResult:
    """Result<Response, AggregateError>

    Attributes:
        status: 최종 상태
        operation: 논리 연산 이름
        payload: 성공 envelope 전체 ({"success": true, ...})
        endpoint: 성공한 후보 URL
        status_code: 성공 응답의 HTTP 상태 코드
        attempts: 모든 시도 기록
        error: 실패 시 예외 (AuthException | AggregateRequestException)
    """

    status: ExecutionStatus
    operation: str
    payload: Optional[dict[str, Any]] = None
    endpoint: Optional[str] = None
    status_code: Optional[int] = None
    attempts: list[RequestAttempt] = field(default_factory=list)
    error: Optional[RequestException] = None

    @property
    def is_success(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @property
    def is_auth_error(self) -> bool:
        return self.status == ExecutionStatus.AUTH_ERROR

    @property
    def data(self) -> Any:
        """envelope 의 data 필드 (없으면 None)"""
        if not self.payload:
            return None
        return self.payload.get("data")

    @classmethod
    def success(
        cls,
        operation: str,
        payload: dict[str, Any],
        endpoint: str,
        status_code: int,
        attempts: list[RequestAttempt],
    ) -> "ExecutionResult":
        return cls(
            status=ExecutionStatus.SUCCESS,
            operation=operation,
            payload=payload,
            endpoint=endpoint,
            status_code=status_code,
            attempts=attempts,
        )

    @classmethod
    def auth_error(
        cls, operation: str, error: AuthException, attempts: list[RequestAttempt]
    ) -> "ExecutionResult":
        return cls(
            status=ExecutionStatus.AUTH_ERROR,
            operation=operation,
            status_code=error.status_code,
            attempts=attempts,
            error=error,
        )

    @classmethod
    def exhausted(cls, operation: str, attempts: list[RequestAttempt]) -> "ExecutionResult":
        return cls(
            status=ExecutionStatus.EXHAUSTED,
            operation=operation,
            attempts=attempts,
            error=AggregateRequestException(operation, attempts),
        )

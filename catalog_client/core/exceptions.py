"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional, Sequence


# 기본 예외 클래스
class CatalogClientException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 유효성 검증 관련 예외 (클라이언트 전용, 네트워크에 도달하지 않음)
class ValidationException(CatalogClientException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        self.field = field
        self.reason = reason
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                        details or {"field": field, "reason": reason})


class FormValidationException(ValidationException):
    """폼 전체 검증 실패 - 필드별 메시지를 함께 보관 (인라인 렌더링용)

    field 는 쉼표로 연결한 필드 목록, reason 은 첫 번째 필드의 메시지입니다.
    """
    def __init__(self, errors: dict[str, str], details: Optional[dict[str, Any]] = None):
        self.errors = dict(errors)
        fields = sorted(self.errors)
        reason = self.errors[fields[0]] if fields else ""
        super().__init__(", ".join(fields), reason, details or {"errors": self.errors})
        self.message = f"Form validation failed: {', '.join(fields)}"
        self.error_code = "FORM_VALIDATION_ERROR"


# 네트워크/요청 관련 예외
class RequestException(CatalogClientException):
    """요청 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "REQUEST_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "REQUEST_ERROR", details)


class NetworkException(RequestException):
    """연결 불가/전송 실패 (같은 후보 내에서 재시도 가능)"""
    def __init__(self, endpoint: str, reason: str, details: Optional[dict[str, Any]] = None):
        self.endpoint = endpoint
        message = f"Network error calling {endpoint}: {reason}"
        super().__init__(message, "NETWORK_ERROR", details or {"endpoint": endpoint, "reason": reason})


class NetworkTimeoutException(NetworkException):
    """네트워크 타임아웃 예외"""
    def __init__(self, endpoint: str, timeout_s: float, details: Optional[dict[str, Any]] = None):
        super().__init__(endpoint, f"timed out after {timeout_s}s",
                        details or {"endpoint": endpoint, "timeout_s": timeout_s})
        self.error_code = "NETWORK_TIMEOUT"


class AuthException(RequestException):
    """401/403 - 후보 루프 전체를 즉시 중단 (재인증 필요)"""
    def __init__(self, status_code: int, endpoint: str, details: Optional[dict[str, Any]] = None):
        self.status_code = status_code
        self.endpoint = endpoint
        message = f"Authentication rejected ({status_code}) by {endpoint}"
        super().__init__(message, "AUTH_ERROR",
                        details or {"status_code": status_code, "endpoint": endpoint})


class ServerException(RequestException):
    """2xx + success:false, 또는 non-2xx 응답"""
    def __init__(self, status_code: int, reason: str, endpoint: str, details: Optional[dict[str, Any]] = None):
        self.status_code = status_code
        self.reason = reason
        self.endpoint = endpoint
        message = f"Server error ({status_code}) from {endpoint}: {reason}"
        super().__init__(message, "SERVER_ERROR",
                        details or {"status_code": status_code, "endpoint": endpoint, "reason": reason})


class AggregateRequestException(RequestException):
    """모든 후보 엔드포인트 소진 - 시도 기록 전체를 진단용으로 보관"""
    def __init__(self, operation: str, attempts: Sequence[Any], details: Optional[dict[str, Any]] = None):
        self.operation = operation
        self.attempts = list(attempts)
        endpoints = {getattr(a, "endpoint", None) for a in self.attempts}
        message = (
            f"All candidates exhausted for '{operation}' "
            f"({len(self.attempts)} attempts over {len(endpoints)} endpoints)"
        )
        super().__init__(message, "CANDIDATES_EXHAUSTED",
                        details or {"operation": operation, "attempt_count": len(self.attempts)})

    @property
    def last_message(self) -> Optional[str]:
        """마지막으로 서버가 알려준 메시지 (UI 표시용)"""
        for attempt in reversed(self.attempts):
            message = getattr(attempt, "message", None)
            if message:
                return message
        return None


# 제출(Submission) 관련 예외
class SubmissionException(CatalogClientException):
    """제출 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "SUBMISSION_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "SUBMISSION_ERROR", details)


class SubmissionInProgressException(SubmissionException):
    """같은 폼에서 제출이 이미 진행 중"""
    def __init__(self, details: Optional[dict[str, Any]] = None):
        super().__init__("A submission is already in flight for this form", "SUBMISSION_IN_PROGRESS", details)


class AssetUploadException(SubmissionException):
    """1단계(에셋 업로드) 실패 - 아직 아무것도 저장되지 않음"""
    def __init__(self, reason: str, cause: Optional[Exception] = None, details: Optional[dict[str, Any]] = None):
        self.cause = cause
        super().__init__(f"Asset upload failed: {reason}", "ASSET_UPLOAD_FAILED",
                        details or {"reason": reason})


class PartialFailureException(SubmissionException):
    """에셋은 업로드되었지만 엔티티 등록이 실패 (orphan asset)

    재제출 시 에셋이 중복 업로드되므로 전체 재시도는 안전하지 않습니다.
    """
    def __init__(self, uploaded_refs: Sequence[str], cause: Optional[Exception] = None,
                 details: Optional[dict[str, Any]] = None):
        self.uploaded_refs = list(uploaded_refs)
        self.cause = cause
        message = (
            f"{len(self.uploaded_refs)} asset(s) were stored but not linked to any entity"
        )
        super().__init__(message, "PARTIAL_FAILURE",
                        details or {"uploaded_refs": self.uploaded_refs,
                                    "cause": str(cause) if cause else None})


# 캐시(로컬 저장소) 관련 예외
class CacheException(CatalogClientException):
    """캐시 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """저장소 접근 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to access cache storage: {reason}"
        super().__init__(message, "CACHE_CONNECTION_ERROR", details or {"reason": reason})


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                        details or {"operation": operation, "reason": reason})

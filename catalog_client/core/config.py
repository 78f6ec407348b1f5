"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """카탈로그 클라이언트 설정"""

    # 엔드포인트 토폴로지
    # - api_base_origin: same-origin 후보의 기준 (예: 프론트가 서빙되는 origin)
    # - api_prefix: 정식(canonical) API 경로 prefix
    # - legacy_fallback_origin: 최후 수단으로 시도하는 배포 백엔드 origin (빈 값이면 비활성화)
    api_base_origin: str = "http://localhost:5000"
    api_prefix: str = "/api"
    legacy_fallback_origin: str = "https://furniture-q3nb.onrender.com"

    # 실행기(Executor) 재시도 정책
    request_timeout_s: float = 10.0
    retry_max_attempts: int = 3
    retry_backoff_s: float = 0.5  # 선형 증가: n번째 실패 후 n * backoff 대기

    http_user_agent: str = "catalog-client/1.0"

    # 관리자 인증 (헤더 + multipart body 에 echo)
    admin_token: Optional[str] = None

    # 파일 업로드
    upload_multiple: bool = True
    upload_max_files: int = 5
    upload_max_size_mb: int = 5
    upload_accept: str = "image/*"

    # 배포에 따라 이미지 업로드와 상품 등록을 분리(two-phase)할지 여부
    separate_asset_upload: bool = False

    # 로컬 캐시 스토어
    cache_backend: str = "memory"  # memory | file | redis
    cache_storage_dir: str = ".catalog_cache"
    cache_storage_key: str = "localCategories"
    redis_url: str = ""

    # 로깅
    log_level: str = "INFO"

    @field_validator("request_timeout_s", "retry_backoff_s")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts and backoff must be positive")
        return v

    @field_validator("retry_max_attempts", "upload_max_files", "upload_max_size_mb")
    @classmethod
    def validate_positive_counts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("retry/upload limits must be positive")
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("memory", "file", "redis"):
            raise ValueError("cache_backend must be one of: memory, file, redis")
        return v

    @field_validator("api_base_origin")
    @classmethod
    def validate_base_origin(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_origin must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("legacy_fallback_origin")
    @classmethod
    def validate_fallback_origin(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("legacy_fallback_origin must start with http:// or https://")
        return v.rstrip("/")

    @property
    def upload_max_size_bytes(self) -> int:
        return self.upload_max_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

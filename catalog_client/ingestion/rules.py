"""파일 검증 규칙 (크기 / MIME 타입)

파일마다 독립적으로 검증합니다. 한 파일의 거부가 같은 배치의 다른 파일에 영향을 주지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .files import RawFile, format_file_size

REASON_SIZE = "size"
REASON_TYPE = "type"
REASON_LIMIT = "limit"


@dataclass(frozen=True)
class IngestionConfig:
    """파일 선택 설정

    Attributes:
        multiple: 여러 파일 허용 여부 (False 면 새 선택이 기존 후보를 대체)
        max_files: 최대 후보 수 (multiple=True 일 때)
        max_size_bytes: 파일당 최대 크기
        accept_pattern: 허용 MIME 패턴 (쉼표 구분, "image/*" 처럼 접두사 매칭 가능)
    """

    multiple: bool = True
    max_files: int = 5
    max_size_bytes: int = 5 * 1024 * 1024
    accept_pattern: str = "image/*"

    def __post_init__(self):
        if self.max_files < 1:
            raise ValueError(f"max_files must be >= 1 (got {self.max_files})")
        if self.max_size_bytes < 1:
            raise ValueError(f"max_size_bytes must be >= 1 (got {self.max_size_bytes})")

    @property
    def capacity(self) -> int:
        return self.max_files if self.multiple else 1

    @classmethod
    def from_settings(cls, settings) -> "IngestionConfig":
        return cls(
            multiple=settings.upload_multiple,
            max_files=settings.upload_max_files,
            max_size_bytes=settings.upload_max_size_bytes,
            accept_pattern=settings.upload_accept,
        )


@dataclass(frozen=True)
class Rejection:
    """거부된 파일 하나"""

    name: str
    reason: str
    message: str = ""


def matches_accept(mime_type: str, accept_pattern: Optional[str]) -> bool:
    """MIME 타입이 accept 패턴에 맞는지

    - 빈 패턴 / "*" → 전부 허용
    - "image/*" → "image/" 접두사 매칭
    - 그 외 → 정확히 일치 (대소문자 무시)
    """
    pattern = (accept_pattern or "").strip()
    if not pattern or pattern == "*":
        return True

    mime = (mime_type or "").strip().lower()
    for accepted in pattern.split(","):
        accepted = accepted.strip().lower()
        if not accepted:
            continue
        if accepted in ("*", "*/*"):
            return True
        if accepted.endswith("/*"):
            if mime.startswith(accepted[:-1]):
                return True
        elif mime == accepted:
            return True
    return False


def validate_file(raw: RawFile, config: IngestionConfig) -> Optional[Rejection]:
    """파일 하나 검증 (통과 시 None)"""
    if raw.size_bytes > config.max_size_bytes:
        return Rejection(
            name=raw.name,
            reason=REASON_SIZE,
            message=(
                f"File \"{raw.name}\" ({format_file_size(raw.size_bytes)}) exceeds the maximum size "
                f"of {format_file_size(config.max_size_bytes)}."
            ),
        )
    if not matches_accept(raw.mime_type, config.accept_pattern):
        return Rejection(
            name=raw.name,
            reason=REASON_TYPE,
            message=f"File \"{raw.name}\" is not an accepted file type ({raw.mime_type or 'unknown'}).",
        )
    return None

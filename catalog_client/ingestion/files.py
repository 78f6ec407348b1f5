"""원본 파일 선택 항목 / 업로드 후보"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union


def format_file_size(size_bytes: int) -> str:
    """사람이 읽기 쉬운 파일 크기 (예: 1536 → "1.5 KB")"""
    if size_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size_bytes / (1024 ** exponent), 2)
    return f"{value:g} {units[exponent]}"


@dataclass(frozen=True)
class RawFile:
    """사용자가 선택한 파일 하나

    크기/MIME 은 메타데이터에서 읽고, 바이트는 payload 를 만들 때만 읽습니다.

    Attributes:
        name: 파일명
        size_bytes: 크기 (바이트)
        mime_type: MIME 타입 (모르면 빈 문자열)
        content: 메모리 상의 바이트 (path 와 둘 중 하나)
        path: 파일시스템 경로
    """

    name: str
    size_bytes: int
    mime_type: str = ""
    content: Optional[bytes] = None
    path: Optional[str] = None

    @classmethod
    def from_bytes(cls, name: str, content: bytes, mime_type: Optional[str] = None) -> "RawFile":
        return cls(
            name=name,
            size_bytes=len(content),
            mime_type=mime_type if mime_type is not None else guess_mime_type(name),
            content=content,
        )

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "RawFile":
        p = Path(path)
        return cls(
            name=p.name,
            size_bytes=os.stat(p).st_size,
            mime_type=mime_type if mime_type is not None else guess_mime_type(p.name),
            path=str(p),
        )

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"RawFile '{self.name}' has neither content nor path")
        return Path(self.path).read_bytes()


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or ""


class CandidateOrigin(str, Enum):
    NEW = "new"  # 아직 업로드되지 않은 로컬 파일
    EXISTING = "existing"  # 서버에 이미 저장된 참조 (URL 문자열)


@dataclass
class UploadCandidate:
    """업로드 후보

    Attributes:
        source_ref: NEW 이면 RawFile, EXISTING 이면 저장된 참조 문자열
        preview_handle: NEW 후보의 미리보기 핸들 (후보당 정확히 1개)
        name: 표시 이름
        size_bytes: 크기 (EXISTING 은 0)
        mime_type: MIME 타입
        origin: NEW | EXISTING
        sequence_index: 세션 내 삽입 순서
    """

    source_ref: Union[RawFile, str]
    name: str
    size_bytes: int
    mime_type: str
    origin: CandidateOrigin
    sequence_index: int
    preview_handle: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.origin == CandidateOrigin.NEW

    @property
    def display_ref(self) -> Optional[str]:
        """화면에 그릴 참조 (NEW 는 미리보기 핸들, EXISTING 은 저장 URL)"""
        if self.is_new:
            return self.preview_handle
        return str(self.source_ref)

    @classmethod
    def existing(cls, reference: str, sequence_index: int) -> "UploadCandidate":
        if not reference or not str(reference).strip():
            raise ValueError("existing reference must not be empty")
        reference = str(reference).strip()
        return cls(
            source_ref=reference,
            name=reference.rstrip("/").rsplit("/", 1)[-1] or reference,
            size_bytes=0,
            mime_type="",
            origin=CandidateOrigin.EXISTING,
            sequence_index=sequence_index,
        )

"""Request Spec - executor 에 넘기는 요청 명세

하나의 명세는 모든 후보 URL / 재시도에 그대로 재사용됩니다.
(파일 파트는 bytes 로 보관하므로 재전송해도 스트림이 소진되지 않음)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class FilePart:
    """multipart 파일 파트"""

    field_name: str
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class MultipartPayload:
    """multipart/form-data 본문

    Attributes:
        fields: 스칼라 필드 (순서 유지, 같은 이름 반복 허용)
        files: 파일 파트
    """

    fields: list[tuple[str, str]] = field(default_factory=list)
    files: list[FilePart] = field(default_factory=list)

    def add_field(self, name: str, value: Any) -> None:
        if value is None:
            return
        self.fields.append((name, str(value)))

    def add_file(self, part: FilePart) -> None:
        self.files.append(part)

    def field_value(self, name: str) -> Optional[str]:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def as_httpx_data(self) -> dict[str, Any]:
        """httpx data= 인자 형식 (반복 필드는 list)"""
        data: dict[str, Any] = {}
        for key, value in self.fields:
            if key in data:
                existing = data[key]
                data[key] = existing + [value] if isinstance(existing, list) else [existing, value]
            else:
                data[key] = value
        return data

    def as_httpx_files(self) -> list[tuple[str, tuple[str, bytes, str]]]:
        return [(p.field_name, (p.filename, p.content, p.content_type)) for p in self.files]

    def as_httpx_field_parts(self) -> list[tuple[str, tuple[None, str]]]:
        """스칼라 필드만 multipart 파트로 (filename 없음)"""
        return [(key, (None, value)) for key, value in self.fields]


@dataclass
class RequestSpec:
    """요청 명세

    Attributes:
        json_body: JSON 본문 (multipart 와 동시 사용 불가)
        form: multipart 본문
        headers: 추가 헤더
        auth_token: Bearer 토큰 (Authorization 헤더로 전송)
    """

    json_body: Optional[dict[str, Any]] = None
    form: Optional[MultipartPayload] = None
    headers: dict[str, str] = field(default_factory=dict)
    auth_token: Optional[str] = None

    def __post_init__(self):
        if self.json_body is not None and self.form is not None:
            raise ValueError("json_body and form are mutually exclusive")

    @property
    def has_body(self) -> bool:
        return self.json_body is not None or self.form is not None

    def build_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self.headers)
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

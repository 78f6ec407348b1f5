"""multipart payload 생성

상품 create/update 본문 필드:
    name, description, price, stock, category, featured ("true"|"false"),
    material?, color?, dimensions? (JSON), discountPrice?,
    images (0..N 파일 파트), existingImages? (JSON 배열), replaceImages? ("true"),
    adminToken? (헤더를 못 읽는 엔드포인트용)
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from catalog_client.engine.request import FilePart, MultipartPayload
from catalog_client.ingestion.files import RawFile, UploadCandidate
from catalog_client.schemas.catalog_schema import ProductFormState

IMAGE_FIELD = "images"


def _number(value: float) -> str:
    """정수값은 소수점 없이 ("1200.0" → "1200")"""
    return str(int(value)) if float(value).is_integer() else str(value)


def candidate_part(candidate: UploadCandidate, field_name: str = IMAGE_FIELD) -> FilePart:
    """NEW 후보 → 파일 파트 (이 시점에 바이트를 읽음)"""
    raw = candidate.source_ref
    if not isinstance(raw, RawFile):
        raise ValueError(f"candidate '{candidate.name}' has no local bytes")
    return FilePart(
        field_name=field_name,
        filename=raw.name,
        content=raw.read_bytes(),
        content_type=raw.mime_type or "application/octet-stream",
    )


def build_asset_payload(candidates: Sequence[UploadCandidate], admin_token: Optional[str] = None) -> MultipartPayload:
    """1단계 에셋 업로드 본문"""
    payload = MultipartPayload()
    for candidate in candidates:
        payload.add_file(candidate_part(candidate))
    if admin_token:
        payload.add_field("adminToken", admin_token)
    return payload


def build_product_payload(
    form: ProductFormState,
    existing_refs: Sequence[str],
    new_candidates: Sequence[UploadCandidate] = (),
    admin_token: Optional[str] = None,
) -> MultipartPayload:
    """상품 create/update 본문

    Args:
        form: 검증된 폼 상태
        existing_refs: 저장된 이미지 참조 (기존 + 1단계에서 새로 저장된 것)
        new_candidates: 이 요청에 바이트로 실어 보낼 NEW 후보 (단일 단계 배포)
        admin_token: body 에 echo 할 관리자 토큰
    """
    payload = MultipartPayload()
    payload.add_field("name", form.name.strip())
    payload.add_field("description", form.description.strip())
    payload.add_field("price", _number(form.price))
    payload.add_field("stock", _number(form.stock))
    payload.add_field("category", form.category.strip())
    payload.add_field("featured", "true" if form.featured else "false")

    if form.material:
        payload.add_field("material", form.material)
    if form.color:
        payload.add_field("color", form.color)
    if form.dimensions is not None and not form.dimensions.is_empty():
        payload.add_field("dimensions", json.dumps(form.dimensions.model_dump()))
    if form.discount_price is not None:
        payload.add_field("discountPrice", _number(form.discount_price))

    for candidate in new_candidates:
        payload.add_file(candidate_part(candidate))

    if existing_refs:
        payload.add_field("existingImages", json.dumps(list(existing_refs)))
    if form.replace_images:
        payload.add_field("replaceImages", "true")
    if admin_token:
        payload.add_field("adminToken", admin_token)
    return payload


def extract_uploaded_refs(data: Any) -> list[str]:
    """에셋 업로드 응답 data → 저장 참조 목록

    data 는 참조 배열이거나 {"files": [...]} / {"urls": [...]} 형태이며,
    각 항목은 문자열 또는 url/secure_url/path 를 가진 객체입니다.
    """
    if isinstance(data, dict):
        data = data.get("files") or data.get("urls") or data.get("images") or data
    if isinstance(data, (str, dict)):
        data = [data]
    if not isinstance(data, list):
        return []

    refs: list[str] = []
    for item in data:
        if isinstance(item, str) and item.strip():
            refs.append(item.strip())
        elif isinstance(item, dict):
            url = item.get("url") or item.get("secure_url") or item.get("path")
            if url:
                refs.append(str(url))
    return refs

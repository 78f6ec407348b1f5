"""Endpoint Resolver - 논리 연산 → 후보 URL 목록

백엔드 URL 토폴로지가 불안정한 배포 환경(리버스 프록시 설정 오류, prefix 누락 등)을
견디기 위해 하나의 논리 연산을 우선순위가 고정된 여러 URL 후보로 펼칩니다.

후보 순서 (고정, 런타임 이력에 따라 재정렬하지 않음):
1. same-origin + API prefix            (정식 경로)
2. same-origin, prefix 없음            (호환 경로)
3. same-origin + prefix 중복           (프록시 오설정 대응)
4. legacy fallback origin + API prefix (최후 수단)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode


@dataclass(frozen=True)
class Operation:
    """논리 연산 (예: "상품 id 수정")

    Attributes:
        name: 로그/진단용 이름
        method: HTTP 메서드
        path: API prefix 를 제외한 상대 경로 (예: "products/123")
        query: 쿼리스트링 (순서 유지)
    """

    name: str
    method: str
    path: str
    query: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def is_read(self) -> bool:
        return self.method.upper() == "GET"

    @property
    def requires_body(self) -> bool:
        return self.method.upper() in ("POST", "PUT", "PATCH")

    # 카테고리
    @classmethod
    def list_categories(cls) -> "Operation":
        return cls("list_categories", "GET", "categories")

    @classmethod
    def create_category(cls) -> "Operation":
        return cls("create_category", "POST", "categories")

    @classmethod
    def update_category(cls, category_id: str) -> "Operation":
        return cls("update_category", "PUT", f"categories/{_require_id(category_id)}")

    @classmethod
    def delete_category(cls, category_id: str) -> "Operation":
        return cls("delete_category", "DELETE", f"categories/{_require_id(category_id)}")

    # 상품
    @classmethod
    def list_products(cls, category_id: Optional[str] = None) -> "Operation":
        query = (("category", category_id),) if category_id else ()
        return cls("list_products", "GET", "products", query)

    @classmethod
    def get_product(cls, product_id: str) -> "Operation":
        return cls("get_product", "GET", f"products/{_require_id(product_id)}")

    @classmethod
    def create_product(cls) -> "Operation":
        return cls("create_product", "POST", "products")

    @classmethod
    def update_product(cls, product_id: str) -> "Operation":
        return cls("update_product", "PUT", f"products/{_require_id(product_id)}")

    # 에셋 (two-phase 제출의 1단계)
    @classmethod
    def upload_assets(cls) -> "Operation":
        return cls("upload_assets", "POST", "uploads/images")


def _require_id(entity_id: str) -> str:
    if not entity_id or not str(entity_id).strip():
        raise ValueError(f"Invalid entity id: {entity_id!r}")
    return str(entity_id).strip()


def normalize_prefix(prefix: str) -> str:
    """API prefix 정규화: "api/" → "/api", "" → ""."""
    p = (prefix or "").strip().strip("/")
    return f"/{p}" if p else ""


def normalize_origin(origin: str) -> str:
    return (origin or "").strip().rstrip("/")


def resolve(
    operation: Operation,
    base_origin: str,
    legacy_fallback_origin: Optional[str],
    api_prefix: str = "/api",
) -> list[str]:
    """논리 연산에 대한 후보 URL 목록 생성 (순수 함수, I/O 없음)

    Args:
        operation: 논리 연산
        base_origin: same-origin 기준 (예: "https://shop.example.com")
        legacy_fallback_origin: 최후 수단 origin (None/빈 값이면 생략)
        api_prefix: 정식 API prefix

    Returns:
        우선순위 순서의 후보 URL 목록 (중복 제거, 최초 순서 유지)

    Raises:
        ValueError: base_origin 이 비어 있는 경우
    """
    base = normalize_origin(base_origin)
    if not base:
        raise ValueError("base_origin must not be empty")

    prefix = normalize_prefix(api_prefix)
    path = operation.path.strip().lstrip("/")
    suffix = f"?{urlencode(operation.query)}" if operation.query else ""

    candidates = [
        f"{base}{prefix}/{path}",
        f"{base}/{path}",
    ]
    # prefix 가 없으면 (c)는 (b)와 동일하므로 중복 제거에서 빠짐
    candidates.append(f"{base}{prefix}{prefix}/{path}")

    fallback = normalize_origin(legacy_fallback_origin or "")
    if fallback:
        candidates.append(f"{fallback}{prefix}/{path}")

    seen: set[str] = set()
    ordered: list[str] = []
    for url in candidates:
        full = f"{url}{suffix}"
        if full in seen:
            continue
        seen.add(full)
        ordered.append(full)
    return ordered


class EndpointResolver:
    """설정값을 묶어 둔 resolve() 래퍼"""

    def __init__(
        self,
        base_origin: str,
        legacy_fallback_origin: Optional[str] = None,
        api_prefix: str = "/api",
    ) -> None:
        self.base_origin = normalize_origin(base_origin)
        self.legacy_fallback_origin = normalize_origin(legacy_fallback_origin or "")
        self.api_prefix = normalize_prefix(api_prefix)

    @classmethod
    def from_settings(cls, settings) -> "EndpointResolver":
        return cls(
            base_origin=settings.api_base_origin,
            legacy_fallback_origin=settings.legacy_fallback_origin,
            api_prefix=settings.api_prefix,
        )

    def resolve(self, operation: Operation) -> list[str]:
        return resolve(operation, self.base_origin, self.legacy_fallback_origin, self.api_prefix)

    def __repr__(self) -> str:
        return (
            f"EndpointResolver(base={self.base_origin}, prefix={self.api_prefix or '[none]'}, "
            f"fallback={self.legacy_fallback_origin or '[none]'})"
        )

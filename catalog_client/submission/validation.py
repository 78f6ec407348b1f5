"""상품 폼 로컬 검증 (네트워크 호출 전)"""

from __future__ import annotations

import math
from typing import Optional

from catalog_client.core.exceptions import FormValidationException
from catalog_client.schemas.catalog_schema import ProductFormState


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def validate_product_form(form: ProductFormState) -> dict[str, str]:
    """필드별 오류 메시지 (비어 있으면 통과)

    규칙:
    - name/description/category 필수
    - price > 0
    - stock 은 0 이상의 정수
    - discountPrice 는 0 이상이고 price 보다 작아야 함
    - dimensions 는 전부 입력하거나 전부 비우고, 입력 시 각 값 > 0
    - 숫자 필드에 inf/nan 은 허용하지 않음
    """
    errors: dict[str, str] = {}

    if _blank(form.name):
        errors["name"] = "Product name is required"
    if _blank(form.description):
        errors["description"] = "Description is required"
    if _blank(form.category):
        errors["category"] = "Category is required"

    if not _finite(form.price) or form.price <= 0:
        errors["price"] = "Price must be a positive number"

    if not _finite(form.stock) or form.stock < 0 or not float(form.stock).is_integer():
        errors["stock"] = "Stock must be a non-negative number"

    if form.discount_price is not None:
        if not _finite(form.discount_price) or form.discount_price < 0:
            errors["discountPrice"] = "Discount price must be a non-negative number"
        elif _finite(form.price) and form.discount_price >= form.price:
            errors["discountPrice"] = "Discount price must be less than regular price"

    dims = form.dimensions
    if dims is not None and not dims.is_empty():
        values = dims.values()
        if any(v is None for v in values):
            errors["dimensions"] = "Length, width and height must all be provided"
        elif any(not _finite(v) or v <= 0 for v in values):
            errors["dimensions"] = "Dimensions must be positive numbers"

    return errors


def ensure_valid(form: ProductFormState) -> None:
    """검증 실패 시 FormValidationException"""
    errors = validate_product_form(form)
    if errors:
        raise FormValidationException(errors)

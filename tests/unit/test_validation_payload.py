"""상품 폼 검증 / multipart payload 단위 테스트."""

from __future__ import annotations

import json

import pytest

from catalog_client.core.exceptions import FormValidationException
from catalog_client.ingestion.files import CandidateOrigin, RawFile, UploadCandidate
from catalog_client.schemas.catalog_schema import ProductFormState
from catalog_client.submission.payload import (
    build_asset_payload,
    build_product_payload,
    extract_uploaded_refs,
)
from catalog_client.submission.validation import ensure_valid, validate_product_form
from tests.fixtures import PRODUCTS


def _form(key: str, **overrides) -> ProductFormState:
    data = dict(PRODUCTS[key])
    data.update(overrides)
    return ProductFormState.model_validate(data)


def _new_candidate(name: str, content: bytes = b"img", index: int = 0) -> UploadCandidate:
    raw = RawFile.from_bytes(name, content, "image/png")
    return UploadCandidate(
        source_ref=raw,
        name=raw.name,
        size_bytes=raw.size_bytes,
        mime_type=raw.mime_type,
        origin=CandidateOrigin.NEW,
        sequence_index=index,
        preview_handle=f"preview:test/{index}",
    )


def test_valid_form_passes():
    assert validate_product_form(_form("valid")) == {}
    assert validate_product_form(_form("minimal")) == {}


def test_required_fields():
    errors = validate_product_form(ProductFormState())
    assert set(errors) == {"name", "description", "category", "price", "stock"}


def test_invalid_numbers():
    errors = validate_product_form(_form("invalid_numbers"))
    assert errors["price"] == "Price must be a positive number"
    assert errors["stock"] == "Stock must be a non-negative number"
    assert errors["discountPrice"] == "Discount price must be less than regular price"


def test_discount_must_be_below_price():
    errors = validate_product_form(_form("valid", discountPrice=1200))
    assert errors == {"discountPrice": "Discount price must be less than regular price"}


def test_dimensions_all_or_nothing():
    errors = validate_product_form(_form("valid", dimensions={"length": 10, "width": None, "height": 5}))
    assert set(errors) == {"dimensions"}

    errors = validate_product_form(_form("valid", dimensions={"length": 10, "width": 0, "height": 5}))
    assert errors["dimensions"] == "Dimensions must be positive numbers"

    assert validate_product_form(_form("valid", dimensions={})) == {}


def test_ensure_valid_raises_with_field_errors():
    with pytest.raises(FormValidationException) as exc:
        ensure_valid(_form("missing_category"))
    assert exc.value.errors == {"category": "Category is required"}
    assert exc.value.error_code == "FORM_VALIDATION_ERROR"


def test_product_payload_fields():
    payload = build_product_payload(
        _form("valid", replaceImages=True),
        ["https://cdn.example.com/a.jpg"],
        [_new_candidate("new.png", b"bytes")],
        admin_token="admin-secret",
    )

    assert payload.field_value("name") == "Oak Dining Table"
    assert payload.field_value("price") == "1200"
    assert payload.field_value("stock") == "4"
    assert payload.field_value("featured") == "true"
    assert payload.field_value("discountPrice") == "999.5"
    assert json.loads(payload.field_value("dimensions")) == {"length": 180, "width": 90, "height": 75}
    assert json.loads(payload.field_value("existingImages")) == ["https://cdn.example.com/a.jpg"]
    assert payload.field_value("replaceImages") == "true"
    assert payload.field_value("adminToken") == "admin-secret"
    assert [(p.field_name, p.filename, p.content) for p in payload.files] == [("images", "new.png", b"bytes")]


def test_product_payload_omits_optional_fields():
    payload = build_product_payload(_form("minimal"), [])

    assert payload.field_value("featured") == "false"
    assert payload.field_value("price") == "45.5"
    for name in ("material", "color", "dimensions", "discountPrice", "existingImages", "replaceImages", "adminToken"):
        assert payload.field_value(name) is None
    assert payload.files == []


def test_asset_payload_reads_bytes():
    payload = build_asset_payload([_new_candidate("a.png", b"A"), _new_candidate("b.png", b"B", 1)])
    assert [p.content for p in payload.files] == [b"A", b"B"]


def test_asset_payload_rejects_existing_candidate():
    with pytest.raises(ValueError):
        build_asset_payload([UploadCandidate.existing("https://cdn.example.com/a.jpg", 0)])


@pytest.mark.parametrize(
    "data,expected",
    [
        (["https://a", "https://b"], ["https://a", "https://b"]),
        ({"files": [{"url": "https://a"}, {"secure_url": "https://b"}]}, ["https://a", "https://b"]),
        ({"urls": ["https://a"]}, ["https://a"]),
        ({"path": "/uploads/a.png"}, ["/uploads/a.png"]),
        ("https://a", ["https://a"]),
        (None, []),
        (42, []),
    ],
)
def test_extract_uploaded_refs(data, expected):
    assert extract_uploaded_refs(data) == expected


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"price": float("nan")}, "price"),
        ({"price": float("inf")}, "price"),
        ({"stock": float("inf")}, "stock"),
        ({"stock": float("nan")}, "stock"),
        ({"discountPrice": float("nan")}, "discountPrice"),
        ({"dimensions": {"length": float("inf"), "width": 90, "height": 75}}, "dimensions"),
    ],
)
def test_non_finite_numbers_are_field_errors(overrides, field):
    errors = validate_product_form(_form("valid", **overrides))
    assert set(errors) == {field}

"""ProductFormSession 단위 테스트 (제출 가드 / 폼 해제)."""

from __future__ import annotations

import asyncio
import json

import pytest

from catalog_client.core.exceptions import SubmissionInProgressException
from catalog_client.engine.result import ExecutionResult
from catalog_client.ingestion.files import RawFile
from catalog_client.ingestion.rules import IngestionConfig
from catalog_client.ingestion.session import UploadSession
from catalog_client.schemas.catalog_schema import ProductFormState
from catalog_client.submission.form import ProductFormSession
from catalog_client.submission.orchestrator import SubmissionOrchestrator
from catalog_client.submission.state import SubmissionState
from tests.conftest import BASE_ORIGIN, reply
from tests.fixtures import API_PAYLOADS, PRODUCTS


class GatedExecutor:
    """release 될 때까지 응답을 보류하는 executor 스텁"""

    def __init__(self):
        self.gate = asyncio.Event()
        self.calls = []

    async def run(self, operation, spec=None):
        self.calls.append(operation)
        await self.gate.wait()
        return ExecutionResult.success(
            operation.name, API_PAYLOADS["product_saved"], "http://shop.test/api/products", 201, []
        )


def _png(name: str) -> RawFile:
    return RawFile.from_bytes(name, b"\x89PNG", "image/png")


@pytest.fixture
def gated() -> GatedExecutor:
    return GatedExecutor()


@pytest.fixture
def form_session(gated) -> ProductFormSession:
    return ProductFormSession(
        SubmissionOrchestrator(gated),
        UploadSession(IngestionConfig(max_files=5)),
    )


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_rejected(form_session, gated):
    form = ProductFormState.model_validate(PRODUCTS["valid"])

    first = asyncio.create_task(form_session.submit(form))
    await asyncio.sleep(0)
    assert form_session.is_submitting

    with pytest.raises(SubmissionInProgressException):
        await form_session.submit(form)

    gated.gate.set()
    result = await first

    assert result.is_success
    assert len(gated.calls) == 1
    assert not form_session.is_submitting


@pytest.mark.asyncio
async def test_successful_create_adopts_persisted_state(form_session, gated):
    form_session.add_files([_png("a.png"), _png("b.png")])
    previews = form_session.uploads.previews
    gated.gate.set()

    result = await form_session.submit(ProductFormState.model_validate(PRODUCTS["valid"]))

    assert result.is_success
    assert form_session.product_id == "6822bb00ab11e96a288ef800"
    assert form_session.state == SubmissionState.SUCCEEDED
    assert previews.live_count == 0
    assert form_session.uploads.existing_references() == [
        "https://cdn.example.com/products/oak-1.jpg",
        "https://cdn.example.com/products/oak-2.jpg",
    ]


@pytest.mark.asyncio
async def test_failed_validation_keeps_candidates(form_session, gated):
    form_session.add_files([_png("a.png")])

    result = await form_session.submit(ProductFormState())

    assert result.state == SubmissionState.FAILED
    assert len(form_session.uploads) == 1
    assert gated.calls == []
    # 가드는 해제되어 다시 제출 가능
    assert not form_session.is_submitting


def test_close_revokes_previews(form_session):
    form_session.add_files([_png("a.png"), _png("b.png"), _png("c.png")])
    form_session.remove_file(1)
    previews = form_session.uploads.previews

    with form_session:
        pass

    assert previews.revoked_count == 3
    assert previews.live_count == 0


def test_initial_state_is_idle(form_session):
    assert form_session.state == SubmissionState.IDLE


@pytest.mark.asyncio
async def test_retry_after_partial_failure_skips_asset_upload(executor, fake_http):
    upload_url = f"{BASE_ORIGIN}/api/uploads/images"
    products_url = f"{BASE_ORIGIN}/api/products"
    fake_http.on(upload_url, reply(200, API_PAYLOADS["assets_uploaded"]))
    session = ProductFormSession(
        SubmissionOrchestrator(executor, separate_asset_upload=True),
        UploadSession(IngestionConfig(max_files=5)),
    )
    session.add_files([_png("a.png"), _png("b.png")])
    previews = session.uploads.previews
    form = ProductFormState.model_validate(PRODUCTS["valid"])

    first = await session.submit(form)

    assert first.state == SubmissionState.PARTIAL_FAILURE
    assert session.uploads.new_candidates() == []
    assert session.uploads.existing_references() == first.uploaded_refs
    assert previews.live_count == 0

    fake_http.on(products_url, reply(201, API_PAYLOADS["product_saved"]))
    second = await session.submit(form)

    assert second.is_success
    assert fake_http.urls_called().count(upload_url) == 1
    assert json.loads(fake_http.specs[-1].form.field_value("existingImages")) == [
        "https://cdn.example.com/uploads/a.png",
        "https://cdn.example.com/uploads/b.png",
    ]
    assert fake_http.specs[-1].form.files == []

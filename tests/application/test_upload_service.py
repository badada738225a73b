"""Tests for cost proof uploads."""

import re

import pytest

from procurement.application.upload_service import UploadService
from procurement.domain import CostProofType
from procurement.domain.exceptions import (
    ForbiddenError,
    UpstreamFailureError,
    ValidationFailureError,
)
from procurement.infrastructure.blob_store import BlobStore, InMemoryBlobStore

MAX_BYTES = 1024


class BrokenBlobStore(BlobStore):
    async def put(self, filename, data, content_type) -> str:
        raise OSError("disk full")


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def service(blob_store: InMemoryBlobStore) -> UploadService:
    return UploadService(blob_store, MAX_BYTES)


class TestUploadCostProof:
    """Tests for UploadService.upload_cost_proof."""

    @pytest.mark.asyncio
    async def test_purchaser_uploads_pdf(self, service, blob_store, purchaser) -> None:
        result = await service.upload_cost_proof(purchaser, b"%PDF-1.4", "application/pdf")
        assert re.fullmatch(r"cost-proof-\d+-[a-z0-9]{9}\.pdf", result.filename)
        assert result.proof_type == CostProofType.PDF
        assert result.size == 8
        assert result.url == f"memory://{result.filename}"
        assert blob_store.files[result.filename] == (b"%PDF-1.4", "application/pdf")

    @pytest.mark.asyncio
    async def test_ceo_uploads_image(self, service, ceo) -> None:
        result = await service.upload_cost_proof(ceo, b"\x89PNG", "image/png")
        assert result.proof_type == CostProofType.IMAGE
        assert result.filename.endswith(".png")

    @pytest.mark.asyncio
    async def test_requester_is_forbidden(self, service, requester) -> None:
        with pytest.raises(ForbiddenError):
            await service.upload_cost_proof(requester, b"%PDF", "application/pdf")

    @pytest.mark.asyncio
    async def test_oversize_file(self, service, purchaser) -> None:
        with pytest.raises(ValidationFailureError):
            await service.upload_cost_proof(purchaser, b"x" * (MAX_BYTES + 1), "application/pdf")

    @pytest.mark.asyncio
    async def test_disallowed_type(self, service, purchaser) -> None:
        with pytest.raises(ValidationFailureError):
            await service.upload_cost_proof(purchaser, b"MZ", "application/x-msdownload")

    @pytest.mark.asyncio
    async def test_empty_file(self, service, purchaser) -> None:
        with pytest.raises(ValidationFailureError):
            await service.upload_cost_proof(purchaser, b"", "application/pdf")

    @pytest.mark.asyncio
    async def test_storage_failure_is_upstream(self, purchaser) -> None:
        service = UploadService(BrokenBlobStore(), MAX_BYTES)
        with pytest.raises(UpstreamFailureError) as exc_info:
            await service.upload_cost_proof(purchaser, b"%PDF", "application/pdf")
        assert isinstance(exc_info.value.__cause__, OSError)

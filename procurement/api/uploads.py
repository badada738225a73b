"""Cost proof upload endpoint.

- POST /uploads - store a PDF or image backing an item's price
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from procurement.api.dependencies import CurrentUser, get_upload_service
from procurement.api.schemas import ErrorResponse, UploadResponse
from procurement.application.upload_service import UploadService

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing, oversize or disallowed file"},
        401: {"model": ErrorResponse, "description": "Not signed in"},
        403: {"model": ErrorResponse, "description": "Purchaser or ceo only"},
        502: {"model": ErrorResponse, "description": "Storage failure"},
    },
)
async def upload_cost_proof(
    user: CurrentUser,
    service: Annotated[UploadService, Depends(get_upload_service)],
    file: Annotated[UploadFile, File()],
) -> UploadResponse:
    """Upload a cost proof file."""
    # One byte past the limit is enough to reject an oversize file
    data = await file.read(service.max_bytes + 1)
    result = await service.upload_cost_proof(user, data, file.content_type)
    return UploadResponse(
        filename=result.filename,
        url=result.url,
        type=result.proof_type.value,
        size=result.size,
    )

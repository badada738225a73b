"""Procurement request API endpoints.

Provides endpoints for the request lifecycle:
- GET /requests - list requests visible to the user
- POST /requests - create a request
- GET /requests/{id} - request details
- PUT /requests/{id} - replace items (owner, editable window)
- DELETE /requests/{id} - delete (owner, editable window)
- POST /requests/{id}/submit - submit a draft
- PUT /requests/{id}/process - process one item (purchaser)
- POST /requests/{id}/process - submit for approval (purchaser)
- PUT /requests/{id}/approve - review one item (ceo)
- POST /requests/{id}/approve - complete the review (ceo)
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from procurement.api.dependencies import CurrentUser, get_request_service
from procurement.api.schemas import (
    ApproveItemBody,
    CreateRequestBody,
    ErrorResponse,
    MessageResponse,
    ProcessItemBody,
    RequestResponse,
    UpdateRequestBody,
)
from procurement.application.request_service import RequestService
from procurement.domain.state_machines import ApprovalStatus, ItemStatus
from procurement.domain.value_objects import (
    CostProofType,
    ItemApproval,
    ItemProcessing,
    parse_enum,
)

router = APIRouter(prefix="/requests", tags=["Requests"])

RequestServiceDep = Annotated[RequestService, Depends(get_request_service)]

_ERRORS: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Not signed in"},
    403: {"model": ErrorResponse, "description": "Role or ownership check failed"},
    404: {"model": ErrorResponse, "description": "Request or item not found"},
    409: {"model": ErrorResponse, "description": "Invalid transition or concurrent write"},
    400: {"model": ErrorResponse, "description": "Validation failed"},
}


# ============================================================================
# Converters
# ============================================================================


def to_processing(body: ProcessItemBody) -> ItemProcessing:
    """Convert a process payload into a domain decision."""
    return ItemProcessing(
        item_status=parse_enum(ItemStatus, body.item_status, "itemStatus"),
        actual_cost=body.actual_cost,
        cost_proof=body.cost_proof,
        cost_proof_type=(
            parse_enum(CostProofType, body.cost_proof_type, "costProofType")
            if body.cost_proof_type
            else None
        ),
        rejection_reason=body.rejection_reason,
        supplier_name=body.supplier_name,
        supplier_reference=body.supplier_reference,
    )


def to_approval(body: ApproveItemBody) -> ItemApproval:
    """Convert an approve payload into a domain decision."""
    return ItemApproval(
        approval_status=parse_enum(ApprovalStatus, body.approval_status, "approvalStatus"),
        ceo_rejection_reason=body.ceo_rejection_reason,
        approved_by=body.approved_by,
        approved_date=body.approved_date,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[RequestResponse],
    response_model_exclude_none=True,
    responses={401: _ERRORS[401]},
)
async def list_requests(user: CurrentUser, service: RequestServiceDep) -> list[dict[str, Any]]:
    """List requests, newest first. Requesters only see their own."""
    requests = await service.list_requests(user)
    return [r.to_document() for r in requests]


@router.post(
    "",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={401: _ERRORS[401], 400: _ERRORS[400], 409: _ERRORS[409]},
)
async def create_request(
    body: CreateRequestBody,
    user: CurrentUser,
    service: RequestServiceDep,
) -> dict[str, Any]:
    """Create a request owned by the signed-in user."""
    request = await service.create_request(
        user,
        items=[item.to_document() for item in body.items],
        status=body.status,
        request_id=body.id,
    )
    return request.to_document()


@router.get(
    "/{request_id}",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses={401: _ERRORS[401], 404: _ERRORS[404]},
)
async def get_request(request_id: str, user: CurrentUser, service: RequestServiceDep) -> dict[str, Any]:
    """Get a single request."""
    request = await service.get_request(user, request_id)
    return request.to_document()


@router.put(
    "/{request_id}",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def update_request(
    request_id: str,
    body: UpdateRequestBody,
    user: CurrentUser,
    service: RequestServiceDep,
) -> dict[str, Any]:
    """Replace the items of a request while it is still editable."""
    request = await service.update_request(
        user, request_id, [item.to_document() for item in body.items]
    )
    return request.to_document()


@router.delete("/{request_id}", response_model=MessageResponse, responses=_ERRORS)
async def delete_request(request_id: str, user: CurrentUser, service: RequestServiceDep) -> MessageResponse:
    """Delete a request while it is still editable."""
    await service.delete_request(user, request_id)
    return MessageResponse(message="Request deleted successfully")


@router.post(
    "/{request_id}/submit",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def submit_request(request_id: str, user: CurrentUser, service: RequestServiceDep) -> dict[str, Any]:
    """Submit a draft to purchasing."""
    request = await service.submit_request(user, request_id)
    return request.to_document()


@router.put(
    "/{request_id}/process",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def process_item(
    request_id: str,
    body: ProcessItemBody,
    user: CurrentUser,
    service: RequestServiceDep,
) -> dict[str, Any]:
    """Price, reject or reset one item."""
    request = await service.process_item(user, request_id, body.item_id, to_processing(body))
    return request.to_document()


@router.post(
    "/{request_id}/process",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def submit_for_approval(request_id: str, user: CurrentUser, service: RequestServiceDep) -> dict[str, Any]:
    """Hand a fully processed request to the approver."""
    request = await service.submit_for_approval(user, request_id)
    return request.to_document()


@router.put(
    "/{request_id}/approve",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def approve_item(
    request_id: str,
    body: ApproveItemBody,
    user: CurrentUser,
    service: RequestServiceDep,
) -> dict[str, Any]:
    """Approve or reject one item."""
    request = await service.approve_item(user, request_id, body.item_id, to_approval(body))
    return request.to_document()


@router.post(
    "/{request_id}/approve",
    response_model=RequestResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def complete_review(request_id: str, user: CurrentUser, service: RequestServiceDep) -> dict[str, Any]:
    """Finalize the review and move the request to its terminal status."""
    request = await service.complete_review(user, request_id)
    return request.to_document()

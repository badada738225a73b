"""API schemas for the procurement API.

Pydantic models for request/response validation and serialization.
JSON bodies use camelCase keys; Python attributes are snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# ============================================================================
# Auth Schemas
# ============================================================================


class EmailRequest(BaseModel):
    """Body carrying an email address (magic link, direct login)."""

    email: str = Field(default="", description="Email address")


class TokenRequest(BaseModel):
    """Body carrying a magic link token."""

    token: str = Field(default="", description="Magic link token")


class UserResponse(BaseModel):
    """Authenticated user."""

    id: str
    email: str
    role: str
    name: str


class MagicLinkResponse(CamelModel):
    """Response to a magic link request.

    The link itself is only included in debug mode.
    """

    message: str
    email: str | None = None
    role: str | None = None
    magic_link: str | None = None


class SessionResponse(CamelModel):
    """Response to a successful sign-in."""

    message: str
    user: UserResponse
    redirect_to: str


class MeResponse(BaseModel):
    """Current session user."""

    user: UserResponse


# ============================================================================
# Request Schemas
# ============================================================================


class ItemInput(CamelModel):
    """Requester-owned item fields.

    Field rules (lengths, dates, URLs) are checked by the domain so that
    every violation is reported per item and field.
    """

    id: str | None = None
    item_name: str = ""
    quantity: float | None = None
    justification: str = ""
    supplier_name: str = ""
    supplier_reference: str = ""
    estimated_cost: float | None = None
    priority: str = ""
    needed_by_date: str = ""

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CreateRequestBody(CamelModel):
    """Request to create a procurement request."""

    id: str | None = Field(default=None, description="Optional client-supplied ID")
    status: str = Field(default="requested", description="'draft' or 'requested'")
    items: list[ItemInput] = Field(default_factory=list)


class UpdateRequestBody(CamelModel):
    """Request to replace the items of a procurement request."""

    items: list[ItemInput] = Field(default_factory=list)


class ProcessItemBody(CamelModel):
    """Purchaser decision for one item."""

    item_id: str
    item_status: str
    actual_cost: float | None = None
    cost_proof: str | None = None
    cost_proof_type: str | None = None
    rejection_reason: str | None = None
    supplier_name: str | None = None
    supplier_reference: str | None = None


class ApproveItemBody(CamelModel):
    """Approver decision for one item."""

    item_id: str
    approval_status: str
    ceo_rejection_reason: str | None = None
    approved_by: str | None = None
    approved_date: str | None = None


class ItemResponse(CamelModel):
    """Request item as stored."""

    id: str
    item_name: str
    quantity: float | None = None
    justification: str
    supplier_name: str
    supplier_reference: str
    estimated_cost: float | None = None
    priority: str
    needed_by_date: str
    item_status: str
    actual_cost: float | None = None
    cost_proof: str | None = None
    cost_proof_type: str | None = None
    rejection_reason: str | None = None
    approval_status: str
    ceo_rejection_reason: str | None = None
    approved_by: str | None = None
    approved_date: str | None = None


class RequestResponse(CamelModel):
    """Procurement request as stored."""

    id: str
    requester_name: str
    request_date: str
    status: str
    items: list[ItemResponse]
    version: int
    processed_by: str | None = None
    processed_date: str | None = None
    approval_completed_by: str | None = None
    approval_completed_date: str | None = None


# ============================================================================
# Upload Schemas
# ============================================================================


class UploadResponse(BaseModel):
    """Stored cost proof file."""

    success: bool = True
    filename: str
    url: str
    type: str = Field(..., description="Cost proof type to use: 'pdf' or 'image'")
    size: int


# ============================================================================
# Dev Schemas
# ============================================================================


class SampleDataResponse(BaseModel):
    """Result of seeding sample requests."""

    message: str
    count: int
    statuses: list[str]

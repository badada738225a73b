"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import math
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Self, TypeVar
from uuid import uuid4

from procurement.domain.base import ValueObject
from procurement.domain.exceptions import ValidationFailureError
from procurement.domain.state_machines import ApprovalStatus, ItemStatus, Role

E = TypeVar("E", bound=Enum)

_ID_ALPHABET = string.ascii_lowercase + string.digits


# ============================================================================
# Enumerations
# ============================================================================


class Priority(str, Enum):
    """How soon the requester needs an item."""

    URGENT = "urgent"
    MEDIUM = "medium"
    LOW = "low"


class CostProofType(str, Enum):
    """Kind of evidence attached to a priced item."""

    PDF = "pdf"
    IMAGE = "image"
    LINK = "link"


def parse_enum(enum_cls: type[E], value: str | None, field_name: str) -> E:
    """Parse a raw string into an enum member.

    Args:
        enum_cls: Enum class to parse into.
        value: Raw value from a payload.
        field_name: Field name used in the error message.

    Returns:
        Matching enum member.

    Raises:
        ValidationFailureError: If value is not a member.
    """
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [member.value for member in enum_cls]
        raise ValidationFailureError(
            f"Invalid {field_name}: {value!r}",
            details={"field": field_name, "allowed": allowed},
        ) from None


# ============================================================================
# Identifiers and timestamps
# ============================================================================


def _random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def generate_request_id() -> str:
    """Generate a request id of the form ``req-<epoch ms>``."""
    return f"req-{_epoch_ms()}"


def generate_item_id() -> str:
    """Generate a request item id."""
    return f"item-{uuid4().hex}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================================
# User
# ============================================================================


@dataclass(frozen=True)
class User(ValueObject):
    """An authenticated user.

    Users are derived from an email claim on every authentication event
    and are never persisted.

    Attributes:
        id: Opaque generated identifier.
        email: Normalized (trimmed, lowercased) email address.
        role: Role resolved from the allowlists.
        name: Display name.
    """

    id: str
    email: str
    role: Role
    name: str

    @classmethod
    def from_email(cls, email: str, role: Role) -> Self:
        """Build a fresh user for an email and resolved role.

        Args:
            email: Normalized email address.
            role: Resolved role.

        Returns:
            New User with a generated id and the email local part as name.
        """
        return cls(
            id=f"user_{_epoch_ms()}_{_random_suffix()}",
            email=email,
            role=role,
            name=email.split("@")[0],
        )

    def to_public_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "name": self.name,
        }


# ============================================================================
# Item operation payloads
# ============================================================================


@dataclass(frozen=True)
class ItemProcessing(ValueObject):
    """Purchaser decision for a single item.

    Attributes:
        item_status: Target purchaser-side status.
        actual_cost: Negotiated unit cost (required when priced).
        cost_proof: URL or file reference backing the cost.
        cost_proof_type: Kind of proof.
        rejection_reason: Why the purchaser rejected the item.
        supplier_name: Optional supplier override.
        supplier_reference: Optional supplier reference override.
    """

    item_status: ItemStatus
    actual_cost: float | None = None
    cost_proof: str | None = None
    cost_proof_type: CostProofType | None = None
    rejection_reason: str | None = None
    supplier_name: str | None = None
    supplier_reference: str | None = None

    def validate(self) -> None:
        """Check the fields required by the target status.

        Raises:
            ValidationFailureError: If a required field is missing or invalid.
        """
        if self.item_status == ItemStatus.REJECTED:
            if not self.rejection_reason or not self.rejection_reason.strip():
                raise ValidationFailureError(
                    "Rejection reason is required when rejecting an item",
                    details={"field": "rejectionReason"},
                )
            return

        if self.item_status == ItemStatus.PRICED:
            if self.actual_cost is None or not math.isfinite(self.actual_cost) or self.actual_cost <= 0:
                raise ValidationFailureError(
                    "Actual cost is required and must be greater than 0 when pricing an item",
                    details={"field": "actualCost"},
                )
            if not self.cost_proof or not self.cost_proof.strip():
                raise ValidationFailureError(
                    "Cost proof (file or link) is required when pricing an item",
                    details={"field": "costProof"},
                )
            if self.cost_proof_type is None:
                raise ValidationFailureError(
                    "Cost proof type must be specified",
                    details={"field": "costProofType"},
                )


@dataclass(frozen=True)
class ItemApproval(ValueObject):
    """Approver decision for a single item.

    Attributes:
        approval_status: Target approver-side status.
        ceo_rejection_reason: Why the approver rejected the item.
        approved_by: Who decided; defaults to the acting user.
        approved_date: When; defaults to now.
    """

    approval_status: ApprovalStatus
    ceo_rejection_reason: str | None = None
    approved_by: str | None = None
    approved_date: str | None = None

    def validate(self) -> None:
        """Check the fields required by the target status.

        Raises:
            ValidationFailureError: If a rejection has no reason.
        """
        if self.approval_status == ApprovalStatus.REJECTED:
            if not self.ceo_rejection_reason or not self.ceo_rejection_reason.strip():
                raise ValidationFailureError(
                    "Rejection reason is required when rejecting an item",
                    details={"field": "ceoRejectionReason"},
                )

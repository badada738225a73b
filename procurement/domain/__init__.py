"""Domain layer - Entities, value objects, state machines, domain events.

This module exports the core domain building blocks:

- **Entities**: ProcurementRequest (aggregate root) and RequestItem
- **Value Objects**: User, ItemProcessing, ItemApproval, enumerations
- **State Machines**: RequestStatus, ItemStatus, ApprovalStatus, Role
- **Domain Events**: Significant workflow occurrences
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from procurement.domain import ProcurementRequest, RequestItem, ItemProcessing, ItemStatus

    request = ProcurementRequest.create(
        request_id="req-1",
        requester_email="alice@company.com",
        items=[RequestItem.from_document({"itemName": "Laptop", ...})],
    )
    request.process_item(
        request.items[0].id,
        ItemProcessing(item_status=ItemStatus.REJECTED, rejection_reason="Out of budget"),
        actor_email="buyer@company.com",
    )
"""

# Base classes
from procurement.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

# Entities
from procurement.domain.entities import ProcurementRequest, RequestItem

# Domain Events
from procurement.domain.events import (
    ItemProcessed,
    ItemReviewed,
    RequestCreated,
    RequestSubmitted,
    RequestSubmittedForApproval,
    RequestUpdated,
    ReviewCompleted,
)

# Exceptions
from procurement.domain.exceptions import (
    AuthenticationRequiredError,
    DomainError,
    ForbiddenError,
    InvalidStateTransitionError,
    InvalidTokenError,
    ItemValidationError,
    NotRequestOwnerError,
    RequestAlreadyExistsError,
    RequestItemNotFoundError,
    RequestNotEditableError,
    RequestNotFoundError,
    UnauthorizedEmailError,
    UpstreamFailureError,
    ValidationFailureError,
    VersionConflictError,
)

# State Machines
from procurement.domain.state_machines import (
    ApprovalStatus,
    ItemStatus,
    RequestStatus,
    Role,
    validate_request_transition,
)

# Value Objects
from procurement.domain.value_objects import (
    CostProofType,
    ItemApproval,
    ItemProcessing,
    Priority,
    User,
)

__all__ = [
    # Base classes
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "ValueObject",
    # Entities
    "ProcurementRequest",
    "RequestItem",
    # Value Objects
    "CostProofType",
    "ItemApproval",
    "ItemProcessing",
    "Priority",
    "User",
    # State Machines
    "ApprovalStatus",
    "ItemStatus",
    "RequestStatus",
    "Role",
    "validate_request_transition",
    # Domain Events
    "ItemProcessed",
    "ItemReviewed",
    "RequestCreated",
    "RequestSubmitted",
    "RequestSubmittedForApproval",
    "RequestUpdated",
    "ReviewCompleted",
    # Exceptions
    "AuthenticationRequiredError",
    "DomainError",
    "ForbiddenError",
    "InvalidStateTransitionError",
    "InvalidTokenError",
    "ItemValidationError",
    "NotRequestOwnerError",
    "RequestAlreadyExistsError",
    "RequestItemNotFoundError",
    "RequestNotEditableError",
    "RequestNotFoundError",
    "UnauthorizedEmailError",
    "UpstreamFailureError",
    "ValidationFailureError",
    "VersionConflictError",
]

"""State machines for domain entities.

Deterministic state machines that define valid state transitions
for procurement requests and their items, plus the closed role
hierarchy that decides who may drive each transition.
"""

from enum import Enum

from procurement.domain.exceptions import InvalidStateTransitionError


# ============================================================================
# Roles
# ============================================================================


class Role(str, Enum):
    """User roles, totally ordered by authority.

    requester < purchaser < ceo
    """

    REQUESTER = "requester"
    PURCHASER = "purchaser"
    CEO = "ceo"

    @property
    def rank(self) -> int:
        """Position of the role in the hierarchy."""
        return _ROLE_RANK[self]

    def at_least(self, other: "Role") -> bool:
        """Check if this role carries at least the authority of another.

        Args:
            other: Role to compare against.

        Returns:
            True if this role ranks equal to or above other.
        """
        return self.rank >= other.rank


_ROLE_RANK: dict[Role, int] = {
    Role.REQUESTER: 1,
    Role.PURCHASER: 2,
    Role.CEO: 3,
}


# ============================================================================
# Request State Machine
# ============================================================================


class RequestStatus(str, Enum):
    """Procurement request lifecycle states.

    State diagram:
        DRAFT
          │
          │ submit (requester)
          ▼
        REQUESTED
          │
          │ submit_for_approval (purchaser, no pending items)
          ▼
        WAITING_FOR_APPROVAL
          │
          │ complete_review (ceo, every approvable item decided)
          ├──────────────────┬──────────────────┐
          ▼                  ▼                  ▼
        APPROVAL_COMPLETED  PROCESSED         REJECTED
        (all approved)      (mixed)           (all rejected)
    """

    DRAFT = "draft"
    REQUESTED = "requested"
    WAITING_FOR_APPROVAL = "waiting_for_approval"
    APPROVAL_COMPLETED = "approval_completed"
    PROCESSED = "processed"
    REJECTED = "rejected"

    def can_transition_to(self, target: "RequestStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _REQUEST_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["RequestStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return sorted(_REQUEST_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state.

        Returns:
            True if no further transitions are possible.
        """
        return len(_REQUEST_TRANSITIONS.get(self, set())) == 0

    def is_initial_status(self) -> bool:
        """Check if a request may be created in this status."""
        return self in {RequestStatus.DRAFT, RequestStatus.REQUESTED}


# Request state transitions (defined outside enum to avoid Enum restrictions)
_REQUEST_TRANSITIONS: dict[RequestStatus, set[RequestStatus]] = {
    RequestStatus.DRAFT: {RequestStatus.REQUESTED},
    RequestStatus.REQUESTED: {RequestStatus.WAITING_FOR_APPROVAL},
    RequestStatus.WAITING_FOR_APPROVAL: {
        RequestStatus.APPROVAL_COMPLETED,
        RequestStatus.PROCESSED,
        RequestStatus.REJECTED,
    },
    RequestStatus.APPROVAL_COMPLETED: set(),  # Terminal state
    RequestStatus.PROCESSED: set(),  # Terminal state
    RequestStatus.REJECTED: set(),  # Terminal state
}


# ============================================================================
# Item Processing State Machine (purchaser)
# ============================================================================


class ItemStatus(str, Enum):
    """Purchaser-side status of a request item.

    While the request is REQUESTED the purchaser may move an item
    freely between these states; the request status gates the machine.

    State diagram:
        PENDING ──price──► PRICED
           │  ▲              │
           │  └──reset───────┤
           │                 │
           └──reject──► REJECTED
    """

    PENDING = "pending"
    PRICED = "priced"
    REJECTED = "rejected"

    def is_processed(self) -> bool:
        """Check if the purchaser has made a decision on the item.

        Returns:
            True for priced or rejected.
        """
        return self in {ItemStatus.PRICED, ItemStatus.REJECTED}


# ============================================================================
# Item Approval State Machine (approver)
# ============================================================================


class ApprovalStatus(str, Enum):
    """Approver-side status of a request item.

    State diagram:
        PENDING_APPROVAL ──approve──► APPROVED
               │
               └────────reject──► REJECTED
    """

    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"

    def is_decided(self) -> bool:
        """Check if the approver has resolved the item.

        Returns:
            True for approved or rejected.
        """
        return self in {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}


# ============================================================================
# State Machine Helpers
# ============================================================================


def validate_request_transition(
    request_id: str,
    current_status: RequestStatus,
    target_status: RequestStatus,
) -> None:
    """Validate and raise if request state transition is invalid.

    Args:
        request_id: Request identifier for error message.
        current_status: Current request status.
        target_status: Target request status.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_type="Request",
            entity_id=request_id,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )


def require_request_status(
    request_id: str,
    current_status: RequestStatus,
    required_status: RequestStatus,
    operation: str,
) -> None:
    """Raise unless the request is in the status an item operation needs.

    Args:
        request_id: Request identifier for error message.
        current_status: Current request status.
        required_status: Status the operation requires.
        operation: Name of the attempted operation.

    Raises:
        InvalidStateTransitionError: If the request is in another status.
    """
    if current_status != required_status:
        raise InvalidStateTransitionError(
            entity_type="Request",
            entity_id=request_id,
            current_state=current_status.value,
            target_state=current_status.value,
            reason=(
                f"Cannot {operation} on request {request_id} in status "
                f"'{current_status.value}' (requires '{required_status.value}')"
            ),
        )

"""Domain events for procurement requests.

Events are recorded by the ProcurementRequest aggregate as its state
changes and logged by the application layer once the new document
has been written.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from procurement.domain.base import DomainEvent


@dataclass(frozen=True)
class RequestCreated(DomainEvent):
    """A requester created a request."""

    event_type: ClassVar[str] = "request.created"

    status: str = ""
    item_count: int = 0

    def details(self) -> dict[str, Any]:
        return {"status": self.status, "item_count": self.item_count}


@dataclass(frozen=True)
class RequestUpdated(DomainEvent):
    """A requester edited a request inside its editable window."""

    event_type: ClassVar[str] = "request.updated"

    item_count: int = 0

    def details(self) -> dict[str, Any]:
        return {"item_count": self.item_count}


@dataclass(frozen=True)
class RequestSubmitted(DomainEvent):
    """A draft request was submitted to purchasing."""

    event_type: ClassVar[str] = "request.submitted"


@dataclass(frozen=True)
class ItemProcessed(DomainEvent):
    """A purchaser priced, rejected or reset an item."""

    event_type: ClassVar[str] = "request.item_processed"

    item_id: str = ""
    item_status: str = ""
    actual_cost: float | None = None

    def details(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "item_status": self.item_status,
            "actual_cost": self.actual_cost,
        }


@dataclass(frozen=True)
class RequestSubmittedForApproval(DomainEvent):
    """A purchaser finished processing and handed the request to the approver."""

    event_type: ClassVar[str] = "request.submitted_for_approval"

    priced_count: int = 0
    rejected_count: int = 0

    def details(self) -> dict[str, Any]:
        return {
            "priced_count": self.priced_count,
            "rejected_count": self.rejected_count,
        }


@dataclass(frozen=True)
class ItemReviewed(DomainEvent):
    """The approver decided on an item."""

    event_type: ClassVar[str] = "request.item_reviewed"

    item_id: str = ""
    approval_status: str = ""

    def details(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "approval_status": self.approval_status}


@dataclass(frozen=True)
class ReviewCompleted(DomainEvent):
    """The approver completed the review and the request reached a final status."""

    event_type: ClassVar[str] = "request.review_completed"

    final_status: str = ""

    def details(self) -> dict[str, Any]:
        return {"final_status": self.final_status}

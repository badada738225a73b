"""Domain entities for the procurement workflow.

The ProcurementRequest aggregate owns an ordered list of RequestItem
entities. Every mutation of items or status goes through the aggregate's
methods, which check the request state machine first and only then
touch fields, so a failed call never leaves a partial change behind.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Self

from procurement.domain.base import AggregateRoot, Entity
from procurement.domain.events import (
    ItemProcessed,
    ItemReviewed,
    RequestCreated,
    RequestSubmitted,
    RequestSubmittedForApproval,
    RequestUpdated,
    ReviewCompleted,
)
from procurement.domain.exceptions import (
    InvalidStateTransitionError,
    ItemValidationError,
    RequestItemNotFoundError,
    RequestNotEditableError,
    ValidationFailureError,
)
from procurement.domain.state_machines import (
    ApprovalStatus,
    ItemStatus,
    RequestStatus,
    require_request_status,
    validate_request_transition,
)
from procurement.domain.validation import validate_items
from procurement.domain.value_objects import (
    CostProofType,
    ItemApproval,
    ItemProcessing,
    Priority,
    generate_item_id,
    parse_timestamp,
    utc_now_iso,
)


def _optional_enum(enum_cls: Any, value: Any) -> Any:
    try:
        return enum_cls(value) if value not in (None, "") else None
    except ValueError:
        return None


def _optional_number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return value


# ============================================================================
# Request Item Entity
# ============================================================================


@dataclass(eq=False)
class RequestItem(Entity):
    """A single line of a procurement request.

    RequestItem is an entity (not an aggregate root) that belongs to the
    ProcurementRequest aggregate. Its fields are split by owner: the
    requester writes the base fields, the purchaser the processing fields,
    the approver the approval fields.
    """

    id: str
    item_name: str = ""
    quantity: float | None = None
    justification: str = ""
    supplier_name: str = ""
    supplier_reference: str = ""
    estimated_cost: float | None = None
    priority: Priority | None = None
    needed_by_date: str = ""

    # Purchaser-owned
    item_status: ItemStatus = ItemStatus.PENDING
    actual_cost: float | None = None
    cost_proof: str | None = None
    cost_proof_type: CostProofType | None = None
    rejection_reason: str | None = None

    # Approver-owned
    approval_status: ApprovalStatus = ApprovalStatus.PENDING_APPROVAL
    ceo_rejection_reason: str | None = None
    approved_by: str | None = None
    approved_date: str | None = None

    @property
    def is_approvable(self) -> bool:
        """Items rejected by the purchaser never reach the approver."""
        return self.item_status != ItemStatus.REJECTED

    def process(self, processing: ItemProcessing) -> None:
        """Apply a purchaser decision.

        Only purchaser-owned fields change. Fields that do not belong to
        the target status are cleared so a priced item never carries a
        rejection reason and a rejected item never carries a cost.

        Args:
            processing: Validated purchaser decision.
        """
        self.item_status = processing.item_status
        if processing.item_status == ItemStatus.PRICED:
            self.actual_cost = processing.actual_cost
            self.cost_proof = processing.cost_proof
            self.cost_proof_type = processing.cost_proof_type
            self.rejection_reason = None
        elif processing.item_status == ItemStatus.REJECTED:
            self.actual_cost = None
            self.cost_proof = None
            self.cost_proof_type = None
            self.rejection_reason = processing.rejection_reason
        else:
            self.actual_cost = None
            self.cost_proof = None
            self.cost_proof_type = None
            self.rejection_reason = None

        if processing.supplier_name is not None:
            self.supplier_name = processing.supplier_name
        if processing.supplier_reference is not None:
            self.supplier_reference = processing.supplier_reference

    def review(self, approval: ItemApproval, actor_email: str) -> None:
        """Apply an approver decision.

        Args:
            approval: Validated approver decision.
            actor_email: Default for approved_by.
        """
        self.approval_status = approval.approval_status
        if approval.approval_status == ApprovalStatus.REJECTED:
            self.ceo_rejection_reason = approval.ceo_rejection_reason
        else:
            self.ceo_rejection_reason = None
        self.approved_by = approval.approved_by or actor_email
        self.approved_date = approval.approved_date or utc_now_iso()

    def reset_workflow(self) -> None:
        """Drop purchaser and approver decisions."""
        self.process(ItemProcessing(item_status=ItemStatus.PENDING))
        self.approval_status = ApprovalStatus.PENDING_APPROVAL
        self.ceo_rejection_reason = None
        self.approved_by = None
        self.approved_date = None

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase document shape."""
        doc: dict[str, Any] = {
            "id": self.id,
            "itemName": self.item_name,
            "quantity": self.quantity,
            "justification": self.justification,
            "supplierName": self.supplier_name,
            "supplierReference": self.supplier_reference,
            "estimatedCost": self.estimated_cost,
            "priority": self.priority.value if self.priority else "",
            "neededByDate": self.needed_by_date,
            "itemStatus": self.item_status.value,
            "approvalStatus": self.approval_status.value,
        }
        optional = {
            "actualCost": self.actual_cost,
            "costProof": self.cost_proof,
            "costProofType": self.cost_proof_type.value if self.cost_proof_type else None,
            "rejectionReason": self.rejection_reason,
            "ceoRejectionReason": self.ceo_rejection_reason,
            "approvedBy": self.approved_by,
            "approvedDate": self.approved_date,
        }
        doc.update({key: value for key, value in optional.items() if value is not None})
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Self:
        """Build an item from a stored document or a creation payload.

        Missing ids are generated; unknown enum values are treated as unset.
        """
        return cls(
            id=doc.get("id") or generate_item_id(),
            item_name=doc.get("itemName") or "",
            quantity=_optional_number(doc.get("quantity")),
            justification=doc.get("justification") or "",
            supplier_name=doc.get("supplierName") or "",
            supplier_reference=doc.get("supplierReference") or "",
            estimated_cost=_optional_number(doc.get("estimatedCost")),
            priority=_optional_enum(Priority, doc.get("priority")),
            needed_by_date=doc.get("neededByDate") or "",
            item_status=_optional_enum(ItemStatus, doc.get("itemStatus")) or ItemStatus.PENDING,
            actual_cost=_optional_number(doc.get("actualCost")),
            cost_proof=doc.get("costProof"),
            cost_proof_type=_optional_enum(CostProofType, doc.get("costProofType")),
            rejection_reason=doc.get("rejectionReason"),
            approval_status=(
                _optional_enum(ApprovalStatus, doc.get("approvalStatus"))
                or ApprovalStatus.PENDING_APPROVAL
            ),
            ceo_rejection_reason=doc.get("ceoRejectionReason"),
            approved_by=doc.get("approvedBy"),
            approved_date=doc.get("approvedDate"),
        )


# ============================================================================
# Procurement Request Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class ProcurementRequest(AggregateRoot):
    """Procurement request aggregate root.

    Attributes:
        id: Externally supplied request identifier.
        requester_name: Email of the creator.
        request_date: ISO-8601 creation timestamp.
        status: Current request status (state machine).
        items: Ordered request items.
        processed_by: Purchaser who submitted for approval.
        processed_date: When the purchaser submitted.
        approval_completed_by: Approver who completed review.
        approval_completed_date: When review was completed.
    """

    id: str
    requester_name: str
    request_date: str
    status: RequestStatus = RequestStatus.REQUESTED
    items: list[RequestItem] = field(default_factory=list)
    processed_by: str | None = None
    processed_date: str | None = None
    approval_completed_by: str | None = None
    approval_completed_date: str | None = None

    @classmethod
    def create(
        cls,
        request_id: str,
        requester_email: str,
        items: list[RequestItem],
        status: RequestStatus = RequestStatus.REQUESTED,
        today: date | None = None,
    ) -> Self:
        """Create a new request.

        Args:
            request_id: Identifier for the request.
            requester_email: Email of the creator.
            items: Initial items; at least one is required.
            status: DRAFT or REQUESTED.
            today: Reference date for item validation.

        Returns:
            New ProcurementRequest.

        Raises:
            ValidationFailureError: If there are no items or the status is not initial.
            ItemValidationError: If created as REQUESTED with invalid items.
        """
        if not status.is_initial_status():
            raise ValidationFailureError(
                f"A request cannot be created in status '{status.value}'",
                details={"field": "status"},
            )
        _require_items(items)
        if status == RequestStatus.REQUESTED:
            _require_valid_items(items, today)

        request = cls(
            id=request_id,
            requester_name=requester_email,
            request_date=utc_now_iso(),
            status=status,
            items=list(items),
        )
        request._record_event(
            RequestCreated(
                aggregate_id=request_id,
                actor=requester_email,
                status=status.value,
                item_count=len(items),
            )
        )
        return request

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    def get_item(self, item_id: str) -> RequestItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def require_item(self, item_id: str) -> RequestItem:
        """Find item by ID or raise RequestItemNotFoundError."""
        item = self.get_item(item_id)
        if item is None:
            raise RequestItemNotFoundError(self.id, item_id)
        return item

    def is_owned_by(self, email: str) -> bool:
        return self.requester_name == email

    @property
    def is_editable(self) -> bool:
        """Whether the requester may still edit or delete the request.

        Drafts are always editable. A requested request stays editable
        until the purchaser has processed any of its items.
        """
        if self.status == RequestStatus.DRAFT:
            return True
        if self.status == RequestStatus.REQUESTED:
            return all(item.item_status == ItemStatus.PENDING for item in self.items)
        return False

    @property
    def pending_items(self) -> list[RequestItem]:
        return [item for item in self.items if not item.item_status.is_processed()]

    @property
    def approvable_items(self) -> list[RequestItem]:
        return [item for item in self.items if item.is_approvable]

    def can_complete_review(self) -> bool:
        """Check that every approvable item has an approver decision.

        Items rejected by the purchaser are excluded.
        """
        return all(item.approval_status.is_decided() for item in self.approvable_items)

    def final_review_status(self) -> RequestStatus:
        """Compute the terminal status from approver decisions.

        All approved gives APPROVAL_COMPLETED, all rejected (or nothing
        left to approve) gives REJECTED, anything else PROCESSED.
        """
        decisions = [item.approval_status for item in self.approvable_items]
        if decisions and all(d == ApprovalStatus.APPROVED for d in decisions):
            return RequestStatus.APPROVAL_COMPLETED
        if all(d == ApprovalStatus.REJECTED for d in decisions):
            return RequestStatus.REJECTED
        return RequestStatus.PROCESSED

    # -------------------------------------------------------------------------
    # Requester Operations
    # -------------------------------------------------------------------------

    def require_editable(self) -> None:
        if not self.is_editable:
            raise RequestNotEditableError(self.id, self.status.value)

    def replace_items(self, items: list[RequestItem], actor_email: str, today: date | None = None) -> None:
        """Replace the item list inside the editable window.

        Args:
            items: New items, requester-owned fields only.
            actor_email: Email of the editor.
            today: Reference date for item validation.

        Raises:
            RequestNotEditableError: Outside the editable window.
            ValidationFailureError: If no items are given.
            ItemValidationError: If the request is REQUESTED and items are invalid.
        """
        self.require_editable()
        _require_items(items)
        if self.status == RequestStatus.REQUESTED:
            _require_valid_items(items, today)

        for item in items:
            item.reset_workflow()
        self.items = list(items)
        self._record_event(
            RequestUpdated(aggregate_id=self.id, actor=actor_email, item_count=len(items))
        )

    def submit(self, actor_email: str, today: date | None = None) -> None:
        """Submit a draft to purchasing.

        Raises:
            InvalidStateTransitionError: If not DRAFT.
            ValidationFailureError: If there are no items.
            ItemValidationError: If any item fails validation.
        """
        validate_request_transition(self.id, self.status, RequestStatus.REQUESTED)
        _require_items(self.items)
        _require_valid_items(self.items, today)

        self.status = RequestStatus.REQUESTED
        self._record_event(RequestSubmitted(aggregate_id=self.id, actor=actor_email))

    # -------------------------------------------------------------------------
    # Purchaser Operations
    # -------------------------------------------------------------------------

    def process_item(self, item_id: str, processing: ItemProcessing, actor_email: str) -> RequestItem:
        """Price, reject or reset a single item.

        Raises:
            InvalidStateTransitionError: If the request is not REQUESTED.
            RequestItemNotFoundError: If the item is not in the request.
            ValidationFailureError: If the decision lacks required fields.
        """
        require_request_status(self.id, self.status, RequestStatus.REQUESTED, "process items")
        item = self.require_item(item_id)
        processing.validate()

        item.process(processing)
        self._record_event(
            ItemProcessed(
                aggregate_id=self.id,
                actor=actor_email,
                item_id=item_id,
                item_status=processing.item_status.value,
                actual_cost=item.actual_cost,
            )
        )
        return item

    def submit_for_approval(self, actor_email: str) -> None:
        """Hand the request to the approver.

        Raises:
            InvalidStateTransitionError: If not REQUESTED or items are still pending.
        """
        validate_request_transition(self.id, self.status, RequestStatus.WAITING_FOR_APPROVAL)
        pending = self.pending_items
        if pending:
            raise InvalidStateTransitionError(
                entity_type="Request",
                entity_id=self.id,
                current_state=self.status.value,
                target_state=RequestStatus.WAITING_FOR_APPROVAL.value,
                reason=f"{len(pending)} items still need to be processed",
            )

        self.status = RequestStatus.WAITING_FOR_APPROVAL
        self.processed_by = actor_email
        self.processed_date = utc_now_iso()
        self._record_event(
            RequestSubmittedForApproval(
                aggregate_id=self.id,
                actor=actor_email,
                priced_count=sum(1 for i in self.items if i.item_status == ItemStatus.PRICED),
                rejected_count=sum(1 for i in self.items if i.item_status == ItemStatus.REJECTED),
            )
        )

    # -------------------------------------------------------------------------
    # Approver Operations
    # -------------------------------------------------------------------------

    def approve_item(self, item_id: str, approval: ItemApproval, actor_email: str) -> RequestItem:
        """Approve or reject a single item.

        Raises:
            InvalidStateTransitionError: If the request is not WAITING_FOR_APPROVAL
                or the purchaser already rejected the item.
            RequestItemNotFoundError: If the item is not in the request.
            ValidationFailureError: If a rejection has no reason.
        """
        require_request_status(
            self.id, self.status, RequestStatus.WAITING_FOR_APPROVAL, "review items"
        )
        item = self.require_item(item_id)
        if not item.is_approvable:
            raise InvalidStateTransitionError(
                entity_type="RequestItem",
                entity_id=item_id,
                current_state=item.item_status.value,
                target_state=approval.approval_status.value,
                reason=f"Item {item_id} was rejected by purchasing and cannot be reviewed",
            )
        approval.validate()

        item.review(approval, actor_email)
        self._record_event(
            ItemReviewed(
                aggregate_id=self.id,
                actor=actor_email,
                item_id=item_id,
                approval_status=approval.approval_status.value,
            )
        )
        return item

    def complete_review(self, actor_email: str) -> RequestStatus:
        """Finalize the request from the approver decisions.

        Returns:
            The terminal status reached.

        Raises:
            InvalidStateTransitionError: If not WAITING_FOR_APPROVAL or items
                still await a decision.
        """
        final_status = self.final_review_status()
        validate_request_transition(self.id, self.status, final_status)
        if not self.can_complete_review():
            undecided = [i for i in self.approvable_items if not i.approval_status.is_decided()]
            raise InvalidStateTransitionError(
                entity_type="Request",
                entity_id=self.id,
                current_state=self.status.value,
                target_state=final_status.value,
                reason=f"{len(undecided)} items still need to be reviewed",
            )

        self.status = final_status
        self.approval_completed_by = actor_email
        self.approval_completed_date = utc_now_iso()
        self._record_event(
            ReviewCompleted(aggregate_id=self.id, actor=actor_email, final_status=final_status.value)
        )
        return final_status

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @property
    def sort_key(self):
        return parse_timestamp(self.request_date)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted JSON document shape."""
        doc: dict[str, Any] = {
            "id": self.id,
            "requesterName": self.requester_name,
            "requestDate": self.request_date,
            "status": self.status.value,
            "items": [item.to_document() for item in self.items],
            "version": self.version,
        }
        optional = {
            "processedBy": self.processed_by,
            "processedDate": self.processed_date,
            "approvalCompletedBy": self.approval_completed_by,
            "approvalCompletedDate": self.approval_completed_date,
        }
        doc.update({key: value for key, value in optional.items() if value is not None})
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Self:
        """Rebuild the aggregate from a stored document."""
        return cls(
            id=doc["id"],
            requester_name=doc["requesterName"],
            request_date=doc["requestDate"],
            status=RequestStatus(doc["status"]),
            items=[RequestItem.from_document(item) for item in doc.get("items", [])],
            processed_by=doc.get("processedBy"),
            processed_date=doc.get("processedDate"),
            approval_completed_by=doc.get("approvalCompletedBy"),
            approval_completed_date=doc.get("approvalCompletedDate"),
            version=doc.get("version", 1),
        )


def _require_items(items: list[RequestItem]) -> None:
    if not items:
        raise ValidationFailureError(
            "A request needs at least one item",
            details={"field": "items"},
        )


def _require_valid_items(items: list[RequestItem], today: date | None) -> None:
    errors = validate_items(items, today)
    if errors:
        raise ItemValidationError(errors)

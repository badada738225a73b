"""Procurement request application service.

Orchestrates the request lifecycle:
- Creating, listing, editing and deleting requests (requester)
- Processing items and submitting for approval (purchaser)
- Reviewing items and completing the review (ceo)

Every operation loads the latest document, runs the role and state
guards, applies the change on the aggregate and writes it back with a
version check. Nothing is written when a guard fails.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from procurement.domain.entities import ProcurementRequest, RequestItem
from procurement.domain.exceptions import (
    ForbiddenError,
    NotRequestOwnerError,
    RequestNotFoundError,
)
from procurement.domain.state_machines import RequestStatus, Role
from procurement.domain.value_objects import (
    ItemApproval,
    ItemProcessing,
    User,
    generate_request_id,
    parse_enum,
)
from procurement.infrastructure.store import RequestRepository

logger = structlog.get_logger()


def _build_items(items: Iterable[dict[str, Any]]) -> list[RequestItem]:
    """Build items from payload documents, keeping requester-owned fields only."""
    built = []
    for doc in items:
        item = RequestItem.from_document(doc)
        item.reset_workflow()
        built.append(item)
    return built


class RequestService:
    """Application service for procurement requests."""

    def __init__(self, repository: RequestRepository) -> None:
        """Initialize service.

        Args:
            repository: Request repository.
        """
        self.repository = repository

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_role(actor: User, role: Role, action: str) -> None:
        if actor.role != role:
            logger.warning(
                "Role check failed",
                action=action,
                required_role=role.value,
                actual_role=actor.role.value,
                user=actor.email,
            )
            raise ForbiddenError(action, role.value, actor.role.value)

    @staticmethod
    def _is_visible(request: ProcurementRequest, actor: User) -> bool:
        if actor.role == Role.REQUESTER:
            return request.is_owned_by(actor.email)
        return True

    async def _load(self, actor: User, request_id: str) -> ProcurementRequest:
        request = await self.repository.get(request_id)
        if request is None or not self._is_visible(request, actor):
            raise RequestNotFoundError(request_id)
        return request

    async def _load_owned(self, actor: User, request_id: str) -> ProcurementRequest:
        request = await self._load(actor, request_id)
        if not request.is_owned_by(actor.email):
            raise NotRequestOwnerError(request_id, actor.email)
        return request

    async def _save(self, request: ProcurementRequest) -> ProcurementRequest:
        await self.repository.save(request)
        self._log_events(request)
        return request

    @staticmethod
    def _log_events(request: ProcurementRequest) -> None:
        for event in request.collect_events():
            logger.info("Domain event", **event.log_fields())

    # -------------------------------------------------------------------------
    # Requester Operations
    # -------------------------------------------------------------------------

    async def create_request(
        self,
        actor: User,
        items: Iterable[dict[str, Any]],
        status: str | RequestStatus = RequestStatus.REQUESTED,
        request_id: str | None = None,
    ) -> ProcurementRequest:
        """Create a request owned by the actor.

        Args:
            actor: Authenticated creator.
            items: Item documents (camelCase keys).
            status: "draft" or "requested".
            request_id: Optional client-supplied ID.

        Returns:
            The stored request.

        Raises:
            ValidationFailureError: If the status is not initial or there are no items.
            ItemValidationError: If a requested request has invalid items.
            RequestAlreadyExistsError: If the ID is taken.
        """
        request = ProcurementRequest.create(
            request_id=request_id or generate_request_id(),
            requester_email=actor.email,
            items=_build_items(items),
            status=parse_enum(RequestStatus, status, "status"),
        )
        await self.repository.add(request)
        self._log_events(request)
        return request

    async def list_requests(self, actor: User) -> list[ProcurementRequest]:
        """List requests visible to the actor, newest first."""
        requests = await self.repository.list_all()
        return [r for r in requests if self._is_visible(r, actor)]

    async def get_request(self, actor: User, request_id: str) -> ProcurementRequest:
        """Get a request visible to the actor.

        Raises:
            RequestNotFoundError: If missing or owned by another requester.
        """
        return await self._load(actor, request_id)

    async def update_request(
        self,
        actor: User,
        request_id: str,
        items: Iterable[dict[str, Any]],
    ) -> ProcurementRequest:
        """Replace the items of a request inside its editable window.

        Raises:
            RequestNotFoundError: If not visible to the actor.
            NotRequestOwnerError: If the actor did not create the request.
            RequestNotEditableError: Outside the editable window.
            ValidationFailureError: If there are no items.
            ItemValidationError: If a requested request gets invalid items.
        """
        request = await self._load_owned(actor, request_id)
        request.replace_items(_build_items(items), actor.email)
        return await self._save(request)

    async def delete_request(self, actor: User, request_id: str) -> None:
        """Delete a request inside its editable window.

        Raises:
            RequestNotFoundError: If not visible to the actor.
            NotRequestOwnerError: If the actor did not create the request.
            RequestNotEditableError: Outside the editable window.
            VersionConflictError: If the request changed after it was read.
        """
        request = await self._load_owned(actor, request_id)
        request.require_editable()
        await self.repository.delete(request)
        logger.info("Request deleted", request_id=request_id, actor=actor.email)

    async def submit_request(self, actor: User, request_id: str) -> ProcurementRequest:
        """Submit a draft to purchasing.

        Raises:
            RequestNotFoundError: If not visible to the actor.
            NotRequestOwnerError: If the actor did not create the request.
            InvalidStateTransitionError: If the request is not a draft.
            ItemValidationError: If any item fails validation.
        """
        request = await self._load_owned(actor, request_id)
        request.submit(actor.email)
        return await self._save(request)

    # -------------------------------------------------------------------------
    # Purchaser Operations
    # -------------------------------------------------------------------------

    async def process_item(
        self,
        actor: User,
        request_id: str,
        item_id: str,
        processing: ItemProcessing,
    ) -> ProcurementRequest:
        """Price, reject or reset one item.

        Raises:
            ForbiddenError: If the actor is not a purchaser.
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If the request is not REQUESTED.
            RequestItemNotFoundError: If the item is not in the request.
            ValidationFailureError: If the decision lacks required fields.
            VersionConflictError: On a concurrent write.
        """
        self._require_role(actor, Role.PURCHASER, "process requests")
        request = await self._load(actor, request_id)
        request.process_item(item_id, processing, actor.email)
        return await self._save(request)

    async def submit_for_approval(self, actor: User, request_id: str) -> ProcurementRequest:
        """Hand a fully processed request to the approver.

        Raises:
            ForbiddenError: If the actor is not a purchaser.
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If not REQUESTED or items are pending.
        """
        self._require_role(actor, Role.PURCHASER, "submit requests for approval")
        request = await self._load(actor, request_id)
        request.submit_for_approval(actor.email)
        return await self._save(request)

    # -------------------------------------------------------------------------
    # Approver Operations
    # -------------------------------------------------------------------------

    async def approve_item(
        self,
        actor: User,
        request_id: str,
        item_id: str,
        approval: ItemApproval,
    ) -> ProcurementRequest:
        """Approve or reject one item.

        Raises:
            ForbiddenError: If the actor is not the ceo.
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If not WAITING_FOR_APPROVAL or the
                item was rejected by purchasing.
            RequestItemNotFoundError: If the item is not in the request.
            ValidationFailureError: If a rejection has no reason.
        """
        self._require_role(actor, Role.CEO, "approve requests")
        request = await self._load(actor, request_id)
        request.approve_item(item_id, approval, actor.email)
        return await self._save(request)

    async def complete_review(self, actor: User, request_id: str) -> ProcurementRequest:
        """Finalize a reviewed request.

        Raises:
            ForbiddenError: If the actor is not the ceo.
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If not WAITING_FOR_APPROVAL or items
                still await a decision.
        """
        self._require_role(actor, Role.CEO, "complete approval reviews")
        request = await self._load(actor, request_id)
        request.complete_review(actor.email)
        return await self._save(request)

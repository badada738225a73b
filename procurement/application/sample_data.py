"""Sample requests for local development.

Seeds one request in each interesting status by driving the aggregates
through the same operations the API uses, so every seeded document is a
valid workflow state.
"""

from datetime import date, datetime, timedelta, timezone

import structlog

from procurement.domain.entities import ProcurementRequest, RequestItem
from procurement.domain.exceptions import RequestAlreadyExistsError
from procurement.domain.state_machines import ApprovalStatus, ItemStatus, RequestStatus
from procurement.domain.value_objects import CostProofType, ItemApproval, ItemProcessing
from procurement.infrastructure.store import RequestRepository

logger = structlog.get_logger()


def _item(item_id: str, name: str, quantity: int, justification: str, supplier: str,
          reference: str, cost: float, priority: str, needed_by: date) -> RequestItem:
    return RequestItem.from_document({
        "id": item_id,
        "itemName": name,
        "quantity": quantity,
        "justification": justification,
        "supplierName": supplier,
        "supplierReference": reference,
        "estimatedCost": cost,
        "priority": priority,
        "neededByDate": needed_by.isoformat(),
    })


def _price(request: ProcurementRequest, item_id: str, cost: float, purchaser: str) -> None:
    request.process_item(
        item_id,
        ItemProcessing(
            item_status=ItemStatus.PRICED,
            actual_cost=cost,
            cost_proof=f"https://quotes.example.com/{item_id}.pdf",
            cost_proof_type=CostProofType.LINK,
        ),
        purchaser,
    )


def build_sample_requests(organization_domain: str, today: date | None = None) -> list[ProcurementRequest]:
    """Build the sample requests without storing them.

    Args:
        organization_domain: Domain used for the sample users.
        today: Reference date for needed-by dates.

    Returns:
        Requests in draft, requested, waiting_for_approval,
        approval_completed and rejected status.
    """
    today = today or datetime.now(timezone.utc).date()
    requester = f"sample.requester@{organization_domain}"
    purchaser = f"sample.purchaser@{organization_domain}"
    ceo = f"sample.ceo@{organization_domain}"

    draft = ProcurementRequest.create(
        "REQ-001",
        requester,
        [
            _item("item-001-1", "Industrial Safety Helmets", 25,
                  "New safety equipment for site workers, urgent replacement needed",
                  "SafetyFirst Equipment", "SF-HELMET-001", 15.50, "urgent", today + timedelta(days=10)),
            _item("item-001-2", "High-Vis Safety Vests", 25,
                  "Matching safety vests for the new helmets",
                  "SafetyFirst Equipment", "SF-VEST-002", 8.75, "urgent", today + timedelta(days=10)),
        ],
        status=RequestStatus.DRAFT,
        today=today,
    )

    requested = ProcurementRequest.create(
        "REQ-002",
        requester,
        [
            _item("item-002-1", "Digital Multimeter", 3,
                  "Electrical testing equipment for the new installation project",
                  "ElectroTools Pro", "FLUKE-117-DMM", 165.00, "medium", today + timedelta(days=17)),
            _item("item-002-2", "Insulated Screwdriver Set", 2,
                  "Safety tools for electrical work on live panels",
                  "ElectroTools Pro", "WIHA-INSUL-SET", 89.50, "medium", today + timedelta(days=17)),
        ],
        today=today,
    )

    waiting = ProcurementRequest.create(
        "REQ-003",
        requester,
        [
            _item("item-003-1", "Rugged Tablet PC", 2,
                  "Mobile devices for field inspections and digital documentation",
                  "TechSolutions", "RUGGED-TAB-10", 850.00, "medium", today + timedelta(days=30)),
        ],
        today=today,
    )
    _price(waiting, "item-003-1", 829.00, purchaser)
    waiting.submit_for_approval(purchaser)

    completed = ProcurementRequest.create(
        "REQ-004",
        requester,
        [
            _item("item-004-1", "Cordless Drill Set", 4,
                  "Replacement tools for the workshop, old drills no longer work",
                  "ToolMaster Distribution", "DCD791-KIT", 145.00, "low", today + timedelta(days=45)),
            _item("item-004-2", "Professional Drill Bit Set", 4,
                  "Matching drill bits for the new cordless drills",
                  "ToolMaster Distribution", "BITS-PRO-SET", 32.50, "low", today + timedelta(days=45)),
        ],
        today=today,
    )
    _price(completed, "item-004-1", 139.00, purchaser)
    _price(completed, "item-004-2", 29.90, purchaser)
    completed.submit_for_approval(purchaser)
    for item_id in ("item-004-1", "item-004-2"):
        completed.approve_item(item_id, ItemApproval(approval_status=ApprovalStatus.APPROVED), ceo)
    completed.complete_review(ceo)

    rejected = ProcurementRequest.create(
        "REQ-005",
        requester,
        [
            _item("item-005-1", "Espresso Machine", 1,
                  "Coffee machine for the site office break room",
                  "Office Comfort", "ESP-2000", 1200.00, "low", today + timedelta(days=60)),
        ],
        today=today,
    )
    _price(rejected, "item-005-1", 1150.00, purchaser)
    rejected.submit_for_approval(purchaser)
    rejected.approve_item(
        "item-005-1",
        ItemApproval(
            approval_status=ApprovalStatus.REJECTED,
            ceo_rejection_reason="Not a business priority this quarter",
        ),
        ceo,
    )
    rejected.complete_review(ceo)

    return [draft, requested, waiting, completed, rejected]


async def seed_sample_requests(
    repository: RequestRepository,
    organization_domain: str,
    today: date | None = None,
) -> list[ProcurementRequest]:
    """Store the sample requests, skipping IDs that already exist.

    Returns:
        The requests that were created by this call.
    """
    created = []
    for request in build_sample_requests(organization_domain, today):
        request.collect_events()
        try:
            await repository.add(request)
        except RequestAlreadyExistsError:
            logger.info("Sample request already present", request_id=request.id)
            continue
        created.append(request)
        logger.info("Sample request created", request_id=request.id, status=request.status.value)
    return created

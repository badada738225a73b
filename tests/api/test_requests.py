"""Tests for procurement request endpoints."""

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient


def create(client: TestClient, items: list[dict[str, Any]], **body: Any) -> dict[str, Any]:
    response = client.post("/requests", json={"items": items, **body})
    assert response.status_code == 201, response.text
    return response.json()


def price(client: TestClient, request_id: str, item_id: str, cost: float = 45.0):
    return client.put(
        f"/requests/{request_id}/process",
        json={
            "itemId": item_id,
            "itemStatus": "priced",
            "actualCost": cost,
            "costProof": "https://quotes.example.com/q-1.pdf",
            "costProofType": "link",
        },
    )


class TestCreateAndRead:
    """Tests for creating, listing and reading requests."""

    def test_requires_session(self, client: TestClient) -> None:
        response = client.get("/requests")
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_REQUIRED"

    def test_create_request(self, requester_client: TestClient, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")

        assert data["id"] == "req-1"
        assert data["status"] == "requested"
        assert data["requesterName"] == "alice@company.com"
        assert data["version"] == 1
        item = data["items"][0]
        assert item["itemStatus"] == "pending"
        assert item["approvalStatus"] == "pending_approval"
        assert item["id"]
        assert "actualCost" not in item
        assert "processedBy" not in data

    def test_create_with_invalid_items(self, requester_client: TestClient, make_item_doc) -> None:
        response = requester_client.post(
            "/requests",
            json={"items": [make_item_doc(id="item-1", justification="short")]},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "VALIDATION_FAILED"
        assert "justification" in data["details"]["items"]["item-1"]

    def test_create_without_items(self, requester_client: TestClient) -> None:
        response = requester_client.post("/requests", json={"items": []})
        assert response.status_code == 400

    def test_malformed_payload(self, requester_client: TestClient) -> None:
        response = requester_client.post("/requests", json={"items": "not-a-list"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    @pytest.mark.parametrize("quantity", [float("nan"), float("inf")])
    def test_non_finite_quantity_rejected(
        self, requester_client: TestClient, make_item_doc, quantity: float
    ) -> None:
        response = requester_client.post(
            "/requests",
            content=json.dumps({"items": [make_item_doc(quantity=quantity)]}),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    def test_duplicate_id(self, requester_client: TestClient, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")
        response = requester_client.post("/requests", json={"id": "req-1", "items": [make_item_doc()]})
        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_EXISTS"

    def test_list_is_filtered_for_requesters(
        self, client_for, requester, other_requester, purchaser, make_item_doc
    ) -> None:
        create(client_for(requester), [make_item_doc()], id="req-alice")
        create(client_for(other_requester), [make_item_doc()], id="req-bob")

        mine = client_for(requester).get("/requests").json()
        everything = client_for(purchaser).get("/requests").json()

        assert [r["id"] for r in mine] == ["req-alice"]
        assert {r["id"] for r in everything} == {"req-alice", "req-bob"}

    def test_get_hidden_request(self, client_for, requester, other_requester, make_item_doc) -> None:
        create(client_for(requester), [make_item_doc()], id="req-alice")
        response = client_for(other_requester).get("/requests/req-alice")
        assert response.status_code == 404
        assert response.json()["error_code"] == "REQUEST_NOT_FOUND"


class TestRequesterEdits:
    """Tests for update, delete and submit."""

    def test_update_items(self, requester_client: TestClient, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")

        response = requester_client.put(
            "/requests/req-1", json={"items": [make_item_doc(itemName="Monitor arm")]}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["items"][0]["itemName"] == "Monitor arm"
        assert data["version"] == 2

    def test_purchaser_cannot_update(self, requester_client, purchaser_client, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")
        response = purchaser_client.put("/requests/req-1", json={"items": [make_item_doc()]})
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_delete(self, requester_client: TestClient, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")

        response = requester_client.delete("/requests/req-1")

        assert response.status_code == 200
        assert response.json() == {"message": "Request deleted successfully"}
        assert requester_client.get("/requests/req-1").status_code == 404

    def test_no_edits_after_processing(self, requester_client, purchaser_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")
        assert price(purchaser_client, "req-1", data["items"][0]["id"]).status_code == 200

        update = requester_client.put("/requests/req-1", json={"items": [make_item_doc()]})
        delete = requester_client.delete("/requests/req-1")

        assert update.status_code == 409
        assert update.json()["error_code"] == "NOT_EDITABLE"
        assert delete.status_code == 409

    def test_submit_draft(self, requester_client: TestClient, make_item_doc) -> None:
        create(requester_client, [{"itemName": "Unfinished"}], id="req-1", status="draft")
        requester_client.put("/requests/req-1", json={"items": [make_item_doc()]})

        response = requester_client.post("/requests/req-1/submit")

        assert response.status_code == 200
        assert response.json()["status"] == "requested"

    def test_submit_twice(self, requester_client: TestClient, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")
        response = requester_client.post("/requests/req-1/submit")
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"


class TestPurchasing:
    """Tests for the purchaser endpoints."""

    def test_price_item(self, requester_client, purchaser_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")

        response = price(purchaser_client, "req-1", data["items"][0]["id"], cost=42.5)

        assert response.status_code == 200
        item = response.json()["items"][0]
        assert item["itemStatus"] == "priced"
        assert item["actualCost"] == 42.5
        assert item["costProofType"] == "link"

    def test_requester_cannot_process(self, requester_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")
        response = price(requester_client, "req-1", data["items"][0]["id"])
        assert response.status_code == 403
        assert response.json()["details"]["required_role"] == "purchaser"

    def test_unknown_item_status(self, requester_client, purchaser_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")
        response = purchaser_client.put(
            "/requests/req-1/process",
            json={"itemId": data["items"][0]["id"], "itemStatus": "bogus"},
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "itemStatus"

    def test_reject_needs_reason(self, requester_client, purchaser_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")
        response = purchaser_client.put(
            "/requests/req-1/process",
            json={"itemId": data["items"][0]["id"], "itemStatus": "rejected"},
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "rejectionReason"

    def test_nan_cost_does_not_price(self, requester_client, purchaser_client, make_item_doc) -> None:
        data = create(requester_client, [make_item_doc()], id="req-1")
        item_id = data["items"][0]["id"]
        body = {
            "itemId": item_id,
            "itemStatus": "priced",
            "actualCost": float("nan"),
            "costProof": "https://quotes.example.com/q-1.pdf",
            "costProofType": "link",
        }

        response = purchaser_client.put(
            "/requests/req-1/process",
            content=json.dumps(body),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        stored = purchaser_client.get("/requests/req-1").json()
        assert stored["items"][0]["itemStatus"] == "pending"

    def test_unknown_item(self, requester_client, purchaser_client, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")
        response = price(purchaser_client, "req-1", "item-missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ITEM_NOT_FOUND"

    def test_submit_with_pending_items(self, requester_client, purchaser_client, make_item_doc) -> None:
        create(requester_client, [make_item_doc()], id="req-1")
        response = purchaser_client.post("/requests/req-1/process")
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"


class TestApproval:
    """Tests for the approver endpoints and the full workflow."""

    @pytest.fixture
    def waiting_request(self, requester_client, purchaser_client, make_item_doc) -> dict[str, Any]:
        data = create(
            requester_client,
            [make_item_doc(id="item-1"), make_item_doc(id="item-2", itemName="Keyboard")],
            id="req-1",
        )
        price(purchaser_client, "req-1", "item-1")
        purchaser_client.put(
            "/requests/req-1/process",
            json={"itemId": "item-2", "itemStatus": "rejected", "rejectionReason": "Out of stock"},
        )
        response = purchaser_client.post("/requests/req-1/process")
        assert response.status_code == 200
        return response.json()

    def test_waiting_for_approval(self, waiting_request) -> None:
        assert waiting_request["status"] == "waiting_for_approval"
        assert waiting_request["processedBy"] == "buyer@company.com"
        assert waiting_request["processedDate"]

    def test_approve_and_complete(self, ceo_client, waiting_request) -> None:
        response = ceo_client.put(
            "/requests/req-1/approve", json={"itemId": "item-1", "approvalStatus": "approved"}
        )
        assert response.status_code == 200
        assert response.json()["items"][0]["approvedBy"] == "boss@company.com"

        response = ceo_client.post("/requests/req-1/approve")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approval_completed"
        assert data["approvalCompletedBy"] == "boss@company.com"

    def test_reject_all_approvable_items(self, ceo_client, waiting_request) -> None:
        ceo_client.put(
            "/requests/req-1/approve",
            json={"itemId": "item-1", "approvalStatus": "rejected", "ceoRejectionReason": "Too expensive"},
        )
        response = ceo_client.post("/requests/req-1/approve")
        assert response.json()["status"] == "rejected"

    def test_cannot_review_item_rejected_by_purchasing(self, ceo_client, waiting_request) -> None:
        response = ceo_client.put(
            "/requests/req-1/approve", json={"itemId": "item-2", "approvalStatus": "approved"}
        )
        assert response.status_code == 409

    def test_complete_with_undecided_items(self, ceo_client, waiting_request) -> None:
        response = ceo_client.post("/requests/req-1/approve")
        assert response.status_code == 409

    def test_purchaser_cannot_approve(self, purchaser_client, waiting_request) -> None:
        response = purchaser_client.put(
            "/requests/req-1/approve", json={"itemId": "item-1", "approvalStatus": "approved"}
        )
        assert response.status_code == 403

    def test_no_processing_after_submission(self, purchaser_client, waiting_request) -> None:
        response = price(purchaser_client, "req-1", "item-1")
        assert response.status_code == 409

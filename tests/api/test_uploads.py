"""Tests for the cost proof upload endpoint."""

from fastapi.testclient import TestClient

from procurement.application.session import SESSION_COOKIE_NAME


class TestUploads:
    """Tests for POST /uploads."""

    def test_purchaser_uploads_pdf(self, purchaser_client: TestClient, blob_store) -> None:
        response = purchaser_client.post(
            "/uploads",
            files={"file": ("quote.pdf", b"%PDF-1.4 quote", "application/pdf")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["type"] == "pdf"
        assert data["size"] == 14
        assert data["url"] == f"memory://{data['filename']}"
        assert data["filename"] in blob_store.files

    def test_image_upload(self, ceo_client: TestClient) -> None:
        response = ceo_client.post(
            "/uploads",
            files={"file": ("receipt.jpg", b"\xff\xd8\xff", "image/jpeg")},
        )
        assert response.status_code == 200
        assert response.json()["type"] == "image"

    def test_requester_cannot_upload(self, requester_client: TestClient) -> None:
        response = requester_client.post(
            "/uploads",
            files={"file": ("quote.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 403

    def test_disallowed_type(self, purchaser_client: TestClient) -> None:
        response = purchaser_client.post(
            "/uploads",
            files={"file": ("tool.exe", b"MZ", "application/octet-stream")},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    def test_missing_file(self, purchaser_client: TestClient) -> None:
        response = purchaser_client.post("/uploads")
        assert response.status_code == 400

    def test_requires_session(self, client: TestClient) -> None:
        response = client.post(
            "/uploads",
            files={"file": ("quote.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 401

    def test_oversize_file_is_read_only_past_the_limit(self, build_app, settings, purchaser) -> None:
        app = build_app(settings.model_copy(update={"max_upload_bytes": 16}))
        token = app.state.container.sessions.tokens.issue_session(purchaser)
        client = TestClient(app, cookies={SESSION_COOKIE_NAME: token})

        response = client.post(
            "/uploads",
            files={"file": ("quote.pdf", b"%PDF" + b"x" * 4096, "application/pdf")},
        )

        assert response.status_code == 400
        assert response.json()["details"]["size"] == 17

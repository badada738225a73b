"""Tests for API middleware."""

from fastapi.testclient import TestClient


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_error_envelope_carries_request_id(self, client: TestClient) -> None:
        """Error bodies echo the correlation ID."""
        response = client.get("/requests", headers={"X-Request-ID": "trace-1"})
        assert response.status_code == 401
        assert response.json() == {
            "error_code": "AUTHENTICATION_REQUIRED",
            "message": "Authentication required",
            "details": {},
            "request_id": "trace-1",
        }


class TestUnhandledErrors:
    """Tests for the last-resort error envelope."""

    def test_unhandled_exception_becomes_envelope(self, app) -> None:
        async def boom() -> None:
            raise RuntimeError("kaboom")

        app.add_api_route("/boom", boom)
        client = TestClient(app)

        response = client.get("/boom", headers={"X-Request-ID": "trace-2"})

        assert response.status_code == 500
        assert response.json() == {
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": "trace-2",
        }
        assert response.headers["X-Request-ID"] == "trace-2"

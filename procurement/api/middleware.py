"""HTTP middleware for the procurement API.

One middleware wraps every request. It assigns the correlation ID,
binds it and the signed-in user's email into the structlog context,
writes the access log line, and turns exceptions that escaped the
exception handlers into the standard error envelope.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from procurement.application.session import SESSION_COOKIE_NAME

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def _session_email(request: Request) -> str | None:
    container = getattr(request.app.state, "container", None)
    if container is None:
        return None
    user = container.sessions.authenticate(request.cookies.get(SESSION_COOKIE_NAME))
    return user.email if user else None


def _internal_error(request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": request_id,
        },
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlation ID, log context and last-resort error envelope.

    The ID comes from the ``X-Request-ID`` header when the client sends
    one and is echoed back on every response, including errors.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            user=_session_email(request),
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.exception(
                    "Unhandled exception",
                    path=request.url.path,
                    method=request.method,
                    error=str(e),
                )
                response = _internal_error(request_id)

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the request context middleware on the app."""
    app.add_middleware(RequestContextMiddleware)

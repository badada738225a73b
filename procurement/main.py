"""Procurement API main application module.

This module builds the FastAPI application: the service container,
middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from procurement.api.auth import router as auth_router
from procurement.api.dependencies import AppContainer
from procurement.api.dev import router as dev_router
from procurement.api.health import router as health_router
from procurement.api.middleware import setup_middleware
from procurement.api.requests import router as requests_router
from procurement.api.uploads import router as uploads_router
from procurement.application.auth_service import AuthService
from procurement.application.identity import RoleResolver
from procurement.application.request_service import RequestService
from procurement.application.session import SessionGateway
from procurement.application.tokens import TokenService
from procurement.application.upload_service import UploadService
from procurement.domain.exceptions import DomainError
from procurement.infrastructure.blob_store import BlobStore, LocalBlobStore
from procurement.infrastructure.config import Settings, settings as default_settings
from procurement.infrastructure.database import create_engine, create_session_factory
from procurement.infrastructure.logging import configure_logging
from procurement.infrastructure.notifier import Notifier, build_notifier
from procurement.infrastructure.sql_store import SqlKeyValueStore
from procurement.infrastructure.store import InMemoryKeyValueStore, KeyValueStore, RequestRepository

logger = structlog.get_logger()

# error_code -> HTTP status
ERROR_STATUS: dict[str, int] = {
    "AUTHENTICATION_REQUIRED": 401,
    "FORBIDDEN": 403,
    "UNAUTHORIZED_EMAIL": 403,
    "INVALID_TOKEN": 400,
    "REQUEST_NOT_FOUND": 404,
    "ITEM_NOT_FOUND": 404,
    "INVALID_TRANSITION": 409,
    "NOT_EDITABLE": 409,
    "VALIDATION_FAILED": 400,
    "ALREADY_EXISTS": 409,
    "VERSION_CONFLICT": 409,
    "UPSTREAM_FAILURE": 502,
}


# ============================================================================
# Container
# ============================================================================


def build_store(settings: Settings) -> KeyValueStore:
    """Pick the SQL store when a database URL is configured."""
    if not settings.database_url:
        return InMemoryKeyValueStore()
    engine = create_engine(settings.database_url, echo=settings.debug)
    return SqlKeyValueStore(create_session_factory(engine), engine=engine)


def build_container(
    settings: Settings,
    store: KeyValueStore | None = None,
    blob_store: BlobStore | None = None,
    notifier: Notifier | None = None,
) -> AppContainer:
    """Wire services from settings and collaborators.

    Args:
        settings: Application settings.
        store: Key-value store; built from settings when omitted.
        blob_store: Upload storage; local directory when omitted.
        notifier: Magic link delivery; built from settings when omitted.

    Returns:
        AppContainer holding every long-lived service.

    Raises:
        ValueError: If the role configuration is invalid.
    """
    store = store or build_store(settings)
    blob_store = blob_store or LocalBlobStore(settings.upload_dir, settings.public_base_url)
    notifier = notifier or build_notifier(settings)

    tokens = TokenService(
        jwt_secret=settings.jwt_secret,
        magic_link_secret=settings.magic_link_secret,
        public_base_url=settings.public_base_url,
        session_ttl_seconds=settings.session_ttl_seconds,
        magic_link_ttl_seconds=settings.magic_link_ttl_seconds,
    )
    repository = RequestRepository(store)
    return AppContainer(
        settings=settings,
        store=store,
        repository=repository,
        sessions=SessionGateway(tokens, settings.session_ttl_seconds, secure=settings.cookie_secure),
        auth_service=AuthService(RoleResolver(settings.role_config()), tokens, notifier),
        request_service=RequestService(repository),
        upload_service=UploadService(blob_store, settings.max_upload_bytes),
    )


# ============================================================================
# Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    container: AppContainer = app.state.container
    logger.info(
        "Starting Procurement API",
        version=container.settings.api_version,
        debug=container.settings.debug,
        store=type(container.store).__name__,
    )

    await container.store.initialize()

    yield

    logger.info("Shutting down Procurement API")
    await container.store.close()


# ============================================================================
# Exception Handlers
# ============================================================================


def _error_response(request: Request, status_code: int, error_code: str, message: str, details) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors onto HTTP statuses."""
    status_code = ERROR_STATUS.get(exc.error_code, 400)
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "Domain error",
        error_code=exc.error_code,
        message=exc.message,
        path=request.url.path,
        method=request.method,
    )
    return _error_response(request, status_code, exc.error_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}
    return _error_response(request, exc.status_code, error_code, message, details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed payloads as validation failures."""
    return _error_response(
        request,
        400,
        "VALIDATION_FAILED",
        "Invalid request payload",
        {"errors": jsonable_encoder(exc.errors())},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return _error_response(request, 500, "INTERNAL_ERROR", "An internal error occurred", {})


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    blob_store: BlobStore | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings; environment defaults when omitted.
        store: Key-value store override.
        blob_store: Upload storage override.
        notifier: Magic link delivery override.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or default_settings
    configure_logging(settings)
    container = build_container(settings, store=store, blob_store=blob_store, notifier=notifier)

    app = FastAPI(
        title="Procurement API",
        description="Role-based procurement request workflow backend",
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container

    # CORS middleware (must be added before custom middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.public_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup custom middleware (request ID, error handling)
    setup_middleware(app)

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(requests_router)
    app.include_router(uploads_router)
    if settings.debug:
        app.include_router(dev_router)

    if isinstance(container.upload_service.blob_store, LocalBlobStore):
        app.mount(
            "/files",
            StaticFiles(directory=settings.upload_dir, check_dir=False),
            name="files",
        )

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app


app = create_app()

"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from procurement.api.auth import router as auth_router
from procurement.api.dev import router as dev_router
from procurement.api.health import router as health_router
from procurement.api.requests import router as requests_router
from procurement.api.uploads import router as uploads_router

__all__ = [
    "auth_router",
    "dev_router",
    "health_router",
    "requests_router",
    "uploads_router",
]

"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from procurement.application.auth_service import AuthService, MagicLinkResult, SessionResult
from procurement.application.identity import RoleResolver
from procurement.application.request_service import RequestService
from procurement.application.session import SESSION_COOKIE_NAME, SessionGateway
from procurement.application.tokens import TokenService
from procurement.application.upload_service import UploadResult, UploadService

__all__ = [
    "AuthService",
    "MagicLinkResult",
    "SessionResult",
    "RoleResolver",
    "RequestService",
    "SESSION_COOKIE_NAME",
    "SessionGateway",
    "TokenService",
    "UploadResult",
    "UploadService",
]

"""FastAPI dependencies.

Services live on a container stored in ``app.state`` and are handed to
endpoints through these dependencies. The current user is resolved from
the session cookie on every request.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Cookie, Depends, Request

from procurement.application.auth_service import AuthService
from procurement.application.request_service import RequestService
from procurement.application.session import SESSION_COOKIE_NAME, SessionGateway
from procurement.application.upload_service import UploadService
from procurement.domain.value_objects import User
from procurement.infrastructure.config import Settings
from procurement.infrastructure.store import KeyValueStore, RequestRepository


@dataclass
class AppContainer:
    """Long-lived objects shared by all requests."""

    settings: Settings
    store: KeyValueStore
    repository: RequestRepository
    sessions: SessionGateway
    auth_service: AuthService
    request_service: RequestService
    upload_service: UploadService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


ContainerDep = Annotated[AppContainer, Depends(get_container)]


def get_settings(container: ContainerDep) -> Settings:
    return container.settings


def get_sessions(container: ContainerDep) -> SessionGateway:
    return container.sessions


def get_auth_service(container: ContainerDep) -> AuthService:
    return container.auth_service


def get_request_service(container: ContainerDep) -> RequestService:
    return container.request_service


def get_upload_service(container: ContainerDep) -> UploadService:
    return container.upload_service


def get_current_user(
    sessions: Annotated[SessionGateway, Depends(get_sessions)],
    session_token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> User:
    """Resolve the signed-in user.

    Raises:
        AuthenticationRequiredError: If the session cookie is missing or invalid.
    """
    return sessions.require_user(session_token)


CurrentUser = Annotated[User, Depends(get_current_user)]

"""Authentication application service.

Orchestrates the passwordless sign-in flow:
- Requesting a magic link for an allowlisted email
- Exchanging a magic link for a session
- Direct login for development setups
"""

from dataclasses import dataclass

import structlog

from procurement.application.identity import RoleResolver, is_valid_email, normalize_email
from procurement.application.tokens import TokenService
from procurement.domain.exceptions import (
    InvalidTokenError,
    UnauthorizedEmailError,
    ValidationFailureError,
)
from procurement.domain.state_machines import Role
from procurement.domain.value_objects import User
from procurement.infrastructure.notifier import Notifier

logger = structlog.get_logger()


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class MagicLinkResult:
    """Result of requesting a magic link."""

    email: str
    role: Role
    magic_link: str
    delivered: bool


@dataclass
class SessionResult:
    """Result of a successful sign-in."""

    user: User
    session_token: str
    redirect_to: str


# ============================================================================
# Auth Service
# ============================================================================


class AuthService:
    """Application service for signing users in."""

    def __init__(self, resolver: RoleResolver, tokens: TokenService, notifier: Notifier) -> None:
        self.resolver = resolver
        self.tokens = tokens
        self.notifier = notifier

    def _authorized_email(self, raw_email: str | None) -> tuple[str, Role]:
        if not raw_email or not raw_email.strip():
            raise ValidationFailureError("Email is required", details={"field": "email"})
        email = normalize_email(raw_email)
        if not is_valid_email(email):
            raise ValidationFailureError("Invalid email format", details={"field": "email"})
        role = self.resolver.resolve_role(email)
        if role is None:
            logger.warning("Sign-in attempt from unauthorized email", email=email)
            raise UnauthorizedEmailError()
        return email, role

    async def request_magic_link(self, raw_email: str | None) -> MagicLinkResult:
        """Issue a magic link and hand it to the notifier.

        Delivery failures are logged and reported in the result but do not
        fail the call.

        Args:
            raw_email: Email as entered by the user.

        Returns:
            MagicLinkResult with the link and delivery outcome.

        Raises:
            ValidationFailureError: If the email is missing or malformed.
            UnauthorizedEmailError: If the email is not allowlisted.
        """
        email, role = self._authorized_email(raw_email)
        link = self.tokens.build_magic_link_url(self.tokens.issue_magic_link(email))

        delivered = True
        try:
            await self.notifier.send(email, link, role)
        except Exception as e:
            delivered = False
            logger.error("Magic link delivery failed", email=email, error=str(e))

        logger.info("Magic link issued", email=email, role=role.value, delivered=delivered)
        return MagicLinkResult(email=email, role=role, magic_link=link, delivered=delivered)

    def exchange_magic_link(self, token: str | None) -> SessionResult:
        """Exchange a magic-link token for a session.

        The role is resolved again at exchange time, so an email removed
        from the allowlists after the link was sent cannot sign in.

        Raises:
            InvalidTokenError: If the token is missing, expired or forged.
            UnauthorizedEmailError: If the email is no longer allowlisted.
        """
        email = self.tokens.verify_magic_link(token)
        if email is None:
            raise InvalidTokenError()
        return self._start_session(email)

    def direct_login(self, raw_email: str | None) -> SessionResult:
        """Sign in without a magic link.

        Raises:
            ValidationFailureError: If the email is missing or malformed.
            UnauthorizedEmailError: If the email is not allowlisted.
        """
        email, _ = self._authorized_email(raw_email)
        return self._start_session(email)

    def _start_session(self, email: str) -> SessionResult:
        user = self.resolver.create_user(email)
        if user is None:
            logger.warning("Session refused for unauthorized email", email=email)
            raise UnauthorizedEmailError()
        logger.info("User signed in", user_id=user.id, email=user.email, role=user.role.value)
        return SessionResult(
            user=user,
            session_token=self.tokens.issue_session(user),
            redirect_to=self.resolver.redirect_path_for(user.role),
        )

"""Tests for the authentication service."""

import pytest

from procurement.application.auth_service import AuthService
from procurement.application.identity import RoleResolver
from procurement.application.tokens import TokenService
from procurement.domain import Role
from procurement.domain.exceptions import (
    InvalidTokenError,
    UnauthorizedEmailError,
    ValidationFailureError,
)
from procurement.infrastructure.notifier import Notifier


class FailingNotifier(Notifier):
    async def send(self, email, link, role) -> None:
        raise ConnectionError("SMTP relay down")


@pytest.fixture
def tokens(settings) -> TokenService:
    return TokenService(
        jwt_secret=settings.jwt_secret,
        magic_link_secret=settings.magic_link_secret,
        public_base_url=settings.public_base_url,
    )


@pytest.fixture
def service(settings, tokens: TokenService, notifier) -> AuthService:
    return AuthService(RoleResolver(settings.role_config()), tokens, notifier)


class TestRequestMagicLink:
    """Tests for AuthService.request_magic_link."""

    @pytest.mark.asyncio
    async def test_sends_link_to_normalized_email(self, service: AuthService, notifier) -> None:
        result = await service.request_magic_link("  Buyer@Company.com ")
        assert result.email == "buyer@company.com"
        assert result.role == Role.PURCHASER
        assert result.delivered
        assert notifier.sent == [("buyer@company.com", result.magic_link, Role.PURCHASER)]
        assert "/auth/callback?token=" in result.magic_link

    @pytest.mark.asyncio
    async def test_malformed_email(self, service: AuthService) -> None:
        with pytest.raises(ValidationFailureError):
            await service.request_magic_link("not-an-email")

    @pytest.mark.asyncio
    async def test_missing_email(self, service: AuthService) -> None:
        with pytest.raises(ValidationFailureError):
            await service.request_magic_link(None)

    @pytest.mark.asyncio
    async def test_unauthorized_email(self, service: AuthService, notifier) -> None:
        with pytest.raises(UnauthorizedEmailError):
            await service.request_magic_link("mallory@evil.com")
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_delivery_failure_does_not_fail(self, settings, tokens: TokenService) -> None:
        service = AuthService(RoleResolver(settings.role_config()), tokens, FailingNotifier())
        result = await service.request_magic_link("alice@company.com")
        assert not result.delivered
        assert result.magic_link


class TestExchange:
    """Tests for magic link exchange and direct login."""

    def test_exchange_issues_session(self, service: AuthService, tokens: TokenService) -> None:
        result = service.exchange_magic_link(tokens.issue_magic_link("boss@company.com"))
        assert result.user.role == Role.CEO
        assert result.redirect_to == "/requests"
        assert tokens.verify_session(result.session_token) == result.user

    def test_invalid_token(self, service: AuthService) -> None:
        with pytest.raises(InvalidTokenError):
            service.exchange_magic_link("garbage")

    def test_email_removed_from_allowlist(self, service: AuthService, tokens: TokenService) -> None:
        token = tokens.issue_magic_link("former@elsewhere.com")
        with pytest.raises(UnauthorizedEmailError):
            service.exchange_magic_link(token)

    def test_direct_login(self, service: AuthService) -> None:
        result = service.direct_login("contractor@partner.org")
        assert result.user.role == Role.REQUESTER

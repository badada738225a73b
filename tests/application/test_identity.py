"""Tests for role resolution."""

import pytest

from procurement.application.identity import RoleResolver, is_valid_email
from procurement.domain import Role
from procurement.infrastructure.config import RoleConfig


@pytest.fixture
def resolver() -> RoleResolver:
    return RoleResolver(
        RoleConfig(
            organization_domain="Company.com",
            ceo_emails=frozenset({"Boss@Company.com"}),
            purchaser_emails=frozenset({"buyer@company.com", "boss@company.com"}),
            external_requester_emails=frozenset({"contractor@partner.org"}),
        )
    )


class TestResolveRole:
    """Tests for RoleResolver.resolve_role."""

    def test_ceo_wins_over_purchaser(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("boss@company.com") == Role.CEO

    def test_purchaser(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("buyer@company.com") == Role.PURCHASER

    def test_organization_domain_is_requester(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("alice@company.com") == Role.REQUESTER

    def test_external_requester(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("contractor@partner.org") == Role.REQUESTER

    def test_unknown_email_is_unauthorized(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("mallory@evil.com") is None
        assert not resolver.is_authorized("mallory@evil.com")

    def test_subdomain_does_not_match(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("eve@mail.company.com") is None

    def test_email_is_normalized(self, resolver: RoleResolver) -> None:
        assert resolver.resolve_role("  BUYER@Company.COM ") == Role.PURCHASER


class TestCreateUser:
    """Tests for RoleResolver.create_user."""

    def test_creates_user_with_role(self, resolver: RoleResolver) -> None:
        user = resolver.create_user("Alice@Company.com")
        assert user is not None
        assert user.email == "alice@company.com"
        assert user.role == Role.REQUESTER
        assert user.name == "alice"

    def test_unauthorized_gets_none(self, resolver: RoleResolver) -> None:
        assert resolver.create_user("mallory@evil.com") is None

    def test_every_role_lands_on_requests(self) -> None:
        assert {RoleResolver.redirect_path_for(role) for role in Role} == {"/requests"}


class TestRoleConfig:
    """Tests for eager configuration validation."""

    @pytest.mark.parametrize("domain", ["", "  ", "nodot", "a@b.com"])
    def test_invalid_domain_rejected(self, domain: str) -> None:
        with pytest.raises(ValueError):
            RoleConfig(organization_domain=domain)

    def test_settings_split_comma_lists(self, settings) -> None:
        config = settings.role_config()
        assert config.ceo_emails == frozenset({"boss@company.com"})
        assert config.organization_domain == "company.com"


@pytest.mark.parametrize(
    "email,valid",
    [("a@b.co", True), ("no-at-sign", False), ("a@b", False), ("a b@c.com", False)],
)
def test_email_format(email: str, valid: bool) -> None:
    assert is_valid_email(email) is valid

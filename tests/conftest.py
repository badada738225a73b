"""Shared fixtures for all tests."""

from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

import pytest

from procurement.domain import Role, User
from procurement.infrastructure.config import Settings
from procurement.infrastructure.notifier import Notifier

ORG_DOMAIN = "company.com"
REQUESTER_EMAIL = "alice@company.com"
OTHER_REQUESTER_EMAIL = "bob@company.com"
PURCHASER_EMAIL = "buyer@company.com"
CEO_EMAIL = "boss@company.com"
EXTERNAL_EMAIL = "contractor@partner.org"


def future_date(days: int = 30) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
def settings() -> Settings:
    """Settings with test allowlists and secrets."""
    return Settings(
        jwt_secret="test-jwt-secret",
        magic_link_secret="test-magic-link-secret",
        public_base_url="http://testserver",
        organization_domain=ORG_DOMAIN,
        ceo_emails=CEO_EMAIL,
        purchaser_emails=PURCHASER_EMAIL,
        external_requester_emails=EXTERNAL_EMAIL,
        database_url="",
        allow_direct_login=True,
        cookie_secure=False,
        debug=False,
    )


class RecordingNotifier(Notifier):
    """Keeps every delivered magic link so tests can follow it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, Role]] = []

    async def send(self, email: str, link: str, role: Role) -> None:
        self.sent.append((email, link, role))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_item_doc() -> Callable[..., dict[str, Any]]:
    """Factory for valid item payloads (camelCase)."""

    def _make(**overrides: Any) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "itemName": "Laptop stand",
            "quantity": 2,
            "justification": "Ergonomic setup for the two new hires",
            "supplierName": "OfficeCo",
            "supplierReference": "OC-STAND-12",
            "estimatedCost": 49.90,
            "priority": "medium",
            "neededByDate": future_date(),
        }
        doc.update(overrides)
        return doc

    return _make


@pytest.fixture
def requester() -> User:
    return User.from_email(REQUESTER_EMAIL, Role.REQUESTER)


@pytest.fixture
def other_requester() -> User:
    return User.from_email(OTHER_REQUESTER_EMAIL, Role.REQUESTER)


@pytest.fixture
def purchaser() -> User:
    return User.from_email(PURCHASER_EMAIL, Role.PURCHASER)


@pytest.fixture
def ceo() -> User:
    return User.from_email(CEO_EMAIL, Role.CEO)

"""Tests for value objects and helpers."""

import re

import pytest

from procurement.domain import ItemStatus, Priority, Role, User
from procurement.domain.exceptions import ValidationFailureError
from procurement.domain.value_objects import (
    generate_item_id,
    generate_request_id,
    parse_enum,
    parse_timestamp,
)


class TestUser:
    """Tests for the User value object."""

    def test_from_email(self) -> None:
        user = User.from_email("alice@company.com", Role.REQUESTER)
        assert user.name == "alice"
        assert user.role == Role.REQUESTER
        assert re.fullmatch(r"user_\d+_[a-z0-9]{9}", user.id)

    def test_users_are_immutable(self) -> None:
        user = User.from_email("alice@company.com", Role.REQUESTER)
        with pytest.raises(AttributeError):
            user.role = Role.CEO  # type: ignore[misc]

    def test_public_dict(self) -> None:
        user = User(id="u1", email="boss@company.com", role=Role.CEO, name="boss")
        assert user.to_public_dict() == {
            "id": "u1",
            "email": "boss@company.com",
            "role": "ceo",
            "name": "boss",
        }


class TestParseEnum:
    """Tests for payload enum parsing."""

    def test_parses_member(self) -> None:
        assert parse_enum(ItemStatus, "priced", "itemStatus") == ItemStatus.PRICED

    def test_unknown_value_is_validation_failure(self) -> None:
        with pytest.raises(ValidationFailureError) as exc_info:
            parse_enum(Priority, "asap", "priority")
        assert exc_info.value.details == {
            "field": "priority",
            "allowed": ["urgent", "medium", "low"],
        }


class TestIdentifiers:
    """Tests for generated identifiers and timestamps."""

    def test_request_id_format(self) -> None:
        assert re.fullmatch(r"req-\d+", generate_request_id())

    def test_item_ids_are_unique(self) -> None:
        assert generate_item_id() != generate_item_id()

    def test_naive_timestamp_is_utc(self) -> None:
        assert parse_timestamp("2030-01-01T10:00:00").tzinfo is not None

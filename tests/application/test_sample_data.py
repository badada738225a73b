"""Tests for sample data seeding."""

from datetime import date

import pytest

from procurement.application.sample_data import build_sample_requests, seed_sample_requests
from procurement.domain import RequestStatus
from procurement.infrastructure.store import InMemoryKeyValueStore, RequestRepository

TODAY = date(2030, 1, 1)


class TestBuildSampleRequests:
    """Tests for the sample request set."""

    def test_one_request_per_status(self) -> None:
        requests = build_sample_requests("company.com", TODAY)
        assert [r.status for r in requests] == [
            RequestStatus.DRAFT,
            RequestStatus.REQUESTED,
            RequestStatus.WAITING_FOR_APPROVAL,
            RequestStatus.APPROVAL_COMPLETED,
            RequestStatus.REJECTED,
        ]

    def test_sample_users_use_organization_domain(self) -> None:
        requests = build_sample_requests("acme.org", TODAY)
        assert all(r.requester_name.endswith("@acme.org") for r in requests)

    def test_dates_follow_reference_day(self) -> None:
        draft = build_sample_requests("company.com", TODAY)[0]
        assert draft.items[0].needed_by_date == "2030-01-11"


class TestSeedSampleRequests:
    """Tests for storing sample requests."""

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self) -> None:
        repository = RequestRepository(InMemoryKeyValueStore())

        created = await seed_sample_requests(repository, "company.com", TODAY)
        again = await seed_sample_requests(repository, "company.com", TODAY)

        assert len(created) == 5
        assert again == []
        assert len(await repository.list_all()) == 5

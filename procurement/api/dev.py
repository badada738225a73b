"""Development-only endpoints.

Mounted only when ``debug`` is enabled.
"""

from fastapi import APIRouter, status

from procurement.api.dependencies import ContainerDep
from procurement.api.schemas import SampleDataResponse
from procurement.application.sample_data import seed_sample_requests

router = APIRouter(prefix="/dev", tags=["Development"])


@router.post("/sample-data", response_model=SampleDataResponse, status_code=status.HTTP_201_CREATED)
async def create_sample_data(container: ContainerDep) -> SampleDataResponse:
    """Seed one request in each interesting status."""
    created = await seed_sample_requests(
        container.repository,
        container.settings.role_config().organization_domain,
    )
    return SampleDataResponse(
        message="Sample requests created successfully",
        count=len(created),
        statuses=[r.status.value for r in created],
    )

"""Server-side quota ledger API."""

from fastapi import APIRouter, Depends

from backend.deps import Services, get_services
from vca.quota import QuotaSnapshot

router = APIRouter()


@router.get("/quota/server", response_model=QuotaSnapshot)
async def quota_snapshot(services: Services = Depends(get_services)):
    return services.ledger.snapshot()


@router.post("/quota/server/reset", response_model=QuotaSnapshot)
async def quota_reset(services: Services = Depends(get_services)):
    services.ledger.reset()
    return services.ledger.snapshot()

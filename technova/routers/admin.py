from fastapi import APIRouter, Depends

from technova.core.security import require_admin
from technova.dependencies import get_aggregator
from technova.models import AnalyticsSnapshot, UserInDB
from technova.services.analytics import AnalyticsAggregator

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/analytics", response_model=AnalyticsSnapshot)
async def get_admin_analytics(
    _admin: UserInDB = Depends(require_admin),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
):
    return await aggregator.snapshot()

from typing import cast

from fastapi import APIRouter

from coretax.api.dependencies import CurrentActor, Dashboard
from coretax.api.schemas.dashboard import DashboardStats
from coretax.core.cache import CacheProfile, cache_key, get_response_cache
from coretax.services.dashboard import CACHE_PREFIX

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(actor: CurrentActor, service: Dashboard) -> DashboardStats:
    """Payment and report totals; taxpayers see only their own figures."""
    cache = get_response_cache()
    key = cache_key(CACHE_PREFIX, actor.id, actor.role)
    if (cached := cache.get(key)) is not None:
        return cast("DashboardStats", cached)

    stats = DashboardStats.model_validate(await service.stats(actor))
    cache.set(key, stats, CacheProfile.DASHBOARD)
    return stats

from fastapi import APIRouter, Depends

from property_lister.schemas.response import APIResponse
from property_lister.utils import deps
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.get("/health", response_model=APIResponse[dict])
async def health(services: ServiceRegistry = Depends(deps.get_services)):
    """Report service status, cache health and background refresh counters."""
    cache_ok = await services.cache_service.health_check()
    return APIResponse(message="Server is healthy", data={
        "cache": "ok" if cache_ok else "unavailable",
        "cache_stats": await services.cache_service.get_cache_stats(),
        "refresh": dict(services.dispatcher.stats),
    })

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..container import Services
from .deps import get_services

router = APIRouter()


@router.get("/healthz")
async def health_check(services: Services = Depends(get_services)) -> Dict[str, Any]:
    """Configuration status of the OpenSea client and the ENS resolver"""

    mcp_client = services.mcp_client
    cache_stats = services.cache.stats()

    opensea_status = {
        "status": "configured" if mcp_client.is_configured else "unavailable",
        "session": mcp_client.state.value,
    }
    ens_status = {
        "status": "configured" if services.resolver.endpoints else "unavailable",
        "endpoints": len(services.resolver.endpoints),
    }

    return {
        # Marketplace tools degrade to the static catalog without a token
        "status": "healthy" if mcp_client.is_configured and services.resolver.endpoints else "degraded",
        "providers": {"opensea_mcp": opensea_status, "ens": ens_status},
        "cache": {
            "names": cache_stats["names"]["size"],
            "profiles": cache_stats["profiles"]["size"],
        },
    }

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ..container import Services
from ..tools.ens_profile import batch_resolve_ens, resolve_ens_profile
from ..types import BatchResolveRequest, EnhanceRequest
from .deps import get_services

router = APIRouter(prefix="/ens")


@router.get("/resolve")
async def resolve_endpoint(
    input: str = Query(..., description="ENS name (e.g. vitalik.eth) or Ethereum address"),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await resolve_ens_profile(services.resolver, input)


@router.post("/batch")
async def batch_resolve_endpoint(
    request: BatchResolveRequest,
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await batch_resolve_ens(services.resolver, request.inputs)


@router.post("/enhance")
async def enhance_endpoint(
    request: EnhanceRequest,
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    """Attach ENS data to every wallet address found in an arbitrary payload."""
    return await services.enhancer.enhance(request.payload, request.include_full_profiles)


@router.get("/cache")
async def cache_stats(services: Services = Depends(get_services)) -> Dict[str, Any]:
    return services.cache.stats()


@router.delete("/cache")
async def flush_cache(services: Services = Depends(get_services)) -> Dict[str, Any]:
    services.resolver.flush()
    return {"success": True}

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ..container import Services
from ..tools.opensea import KNOWN_OPERATIONS_VERSION, OPENSEA_TOOLS
from ..types import ToolCallRequest
from .deps import get_services

router = APIRouter(prefix="/tools")


@router.get("/opensea")
async def list_opensea_tools(services: Services = Depends(get_services)) -> Dict[str, Any]:
    """List OpenSea marketplace operations; falls back to the static catalog."""
    tools = await services.invoker.list_operations()
    return {
        "tools": tools,
        "count": len(tools),
        "catalog_version": KNOWN_OPERATIONS_VERSION,
    }


@router.post("/opensea/{tool_name}")
async def call_opensea_tool(
    tool_name: str,
    request: ToolCallRequest,
    services: Services = Depends(get_services),
) -> Any:
    """Run one OpenSea tool; wallet addresses in the result get ENS data attached."""
    if tool_name not in OPENSEA_TOOLS:
        raise HTTPException(status_code=404, detail=f"Unknown OpenSea tool '{tool_name}'")

    return await services.opensea.run(
        tool_name,
        request.arguments,
        include_ens_profiles=request.include_ens_profiles,
    )

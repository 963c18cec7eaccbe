from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ToolCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Arguments forwarded to the OpenSea tool")
    include_ens_profiles: Optional[bool] = Field(
        default=None,
        description="Attach full ENS profiles instead of names only (tool default when omitted)",
    )


class BatchResolveRequest(BaseModel):
    inputs: List[str] = Field(min_length=1, max_length=50, description="ENS names or Ethereum addresses")


class EnhanceRequest(BaseModel):
    payload: Dict[str, Any] = Field(description="Arbitrary payload to scan for wallet addresses")
    include_full_profiles: bool = Field(default=False, description="Resolve full profiles instead of names only")

from .identity import IdentityRecord, ResolutionState
from .requests import BatchResolveRequest, EnhanceRequest, ToolCallRequest

__all__ = [
    "IdentityRecord",
    "ResolutionState",
    "BatchResolveRequest",
    "EnhanceRequest",
    "ToolCallRequest",
]

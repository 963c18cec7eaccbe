"""
OpenSea marketplace tools on top of the MCP session client.

``OpenSeaToolInvoker`` is the thin list/call layer. ``OpenSeaTools`` adds the
chat-facing tool functions: it drops unset arguments, attaches ENS identity
data to results that carry wallet addresses, and turns every failure into a
generic error payload (raw transport/protocol text is only logged).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ConfigurationError, WalletLensError
from ..providers.opensea_mcp import OpenSeaMCPClient
from ..services.enhancer import ENSEnhancer

logger = logging.getLogger(__name__)

LIST_TOOLS_METHOD = "tools/list"
CALL_TOOL_METHOD = "tools/call"

# Served when the remote listing cannot be obtained. Bump the version when
# the OpenSea MCP tool set changes.
KNOWN_OPERATIONS_VERSION = "2025-08-01"
KNOWN_OPERATIONS: Tuple[Dict[str, str], ...] = (
    {"name": "search", "description": "Search OpenSea marketplace"},
    {"name": "fetch", "description": "Fetch entity details"},
    {"name": "search_collections", "description": "Search NFT collections"},
    {"name": "get_collection", "description": "Get collection details"},
    {"name": "search_items", "description": "Search NFT items"},
    {"name": "get_item", "description": "Get item details"},
    {"name": "search_tokens", "description": "Search tokens"},
    {"name": "get_token", "description": "Get token details"},
    {"name": "get_token_swap_quote", "description": "Get swap quote"},
    {"name": "get_token_balances", "description": "Get token balances"},
)


def known_operations() -> List[Dict[str, str]]:
    return [dict(operation) for operation in KNOWN_OPERATIONS]


class OpenSeaToolInvoker:
    """List and call remote OpenSea operations."""

    def __init__(self, client: OpenSeaMCPClient):
        self.client = client

    async def list_operations(self) -> List[Dict[str, Any]]:
        """Remote tool catalog, or the static catalog when unavailable. Never raises."""
        if not self.client.is_configured:
            logger.warning("OpenSea MCP not configured; serving static tool catalog")
            return known_operations()

        try:
            result = await self.client.invoke(LIST_TOOLS_METHOD, {})
        except WalletLensError as exc:
            logger.warning("Failed to list OpenSea MCP tools: %s", exc)
            return known_operations()
        except Exception:
            logger.exception("Unexpected error listing OpenSea MCP tools")
            return known_operations()

        tools = result.get("tools") if isinstance(result, dict) else None
        if not isinstance(tools, list):
            logger.warning("OpenSea MCP tool listing had no tool list; serving static catalog")
            return known_operations()
        return tools

    async def call_operation(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Call one remote tool and return its result; errors propagate with context."""
        if not self.client.is_configured:
            raise ConfigurationError("OpenSea MCP not configured")

        try:
            await self.client.connect()
            return await self.client.invoke(
                CALL_TOOL_METHOD,
                {"name": name, "arguments": arguments or {}},
            )
        except WalletLensError as exc:
            logger.error("Failed to call MCP tool %s: %s", name, exc)
            raise exc.with_context(f"OpenSea tool '{name}' failed") from exc


@dataclass(frozen=True)
class OpenSeaTool:
    """Chat-facing definition of one remote OpenSea operation."""

    remote_name: str
    description: str
    action: str
    enhance: bool = True
    include_profiles_default: bool = False


OPENSEA_TOOLS: Dict[str, OpenSeaTool] = {
    "search": OpenSeaTool(
        remote_name="search",
        description=(
            "AI-powered search across OpenSea marketplace data for NFTs, collections, "
            "tokens, and more. Automatically resolves ENS names for wallet addresses."
        ),
        action="search OpenSea",
    ),
    "fetch_entity": OpenSeaTool(
        remote_name="fetch",
        description="Retrieve full details of a specific OpenSea entity by ID with ENS resolution for addresses",
        action="fetch entity",
        include_profiles_default=True,
    ),
    "search_collections": OpenSeaTool(
        remote_name="search_collections",
        description="Search for NFT collections by name, description, or metadata with ENS resolution",
        action="search collections",
    ),
    "get_collection": OpenSeaTool(
        remote_name="get_collection",
        description="Get detailed information about a specific NFT collection with ENS resolution for creator and owner addresses",
        action="get collection",
        include_profiles_default=True,
    ),
    "search_items": OpenSeaTool(
        remote_name="search_items",
        description="Search for individual NFT items across OpenSea with ENS resolution for owner addresses",
        action="search items",
        include_profiles_default=True,
    ),
    "get_item": OpenSeaTool(
        remote_name="get_item",
        description="Get detailed information about a specific NFT including price history and owner ENS information",
        action="get item",
        include_profiles_default=True,
    ),
    "search_tokens": OpenSeaTool(
        remote_name="search_tokens",
        description="Search for cryptocurrencies and tokens",
        action="search tokens",
        enhance=False,
    ),
    "get_token": OpenSeaTool(
        remote_name="get_token",
        description="Get information about a specific cryptocurrency token",
        action="get token",
        enhance=False,
    ),
    "get_token_swap_quote": OpenSeaTool(
        remote_name="get_token_swap_quote",
        description="Get a swap quote and blockchain actions for token swap",
        action="get swap quote",
        enhance=False,
    ),
    "get_token_balances": OpenSeaTool(
        remote_name="get_token_balances",
        description="Retrieve all token balances for a wallet address",
        action="get token balances",
        enhance=False,
    ),
}


def failure_payload(action: str, exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, ConfigurationError):
        message = f"Failed to {action}: OpenSea tools are not configured."
    else:
        message = f"Failed to {action}: the OpenSea service is currently unavailable. Please try again later."
    return {"error": True, "message": message}


class OpenSeaTools:
    """Chat-facing OpenSea tool functions."""

    def __init__(self, invoker: OpenSeaToolInvoker, enhancer: ENSEnhancer):
        self.invoker = invoker
        self.enhancer = enhancer

    async def run(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        include_ens_profiles: Optional[bool] = None,
    ) -> Any:
        tool = OPENSEA_TOOLS.get(tool_name)
        if tool is None:
            raise KeyError(f"Unknown OpenSea tool '{tool_name}'")

        cleaned = {key: value for key, value in (arguments or {}).items() if value is not None}
        try:
            response = await self.invoker.call_operation(tool.remote_name, cleaned)
        except WalletLensError as exc:
            logger.error("Error in OpenSea tool %s: %s", tool_name, exc)
            return failure_payload(tool.action, exc)

        if not tool.enhance:
            return response

        if include_ens_profiles is None:
            include_ens_profiles = tool.include_profiles_default
        return await self.enhancer.enhance(response, include_ens_profiles)

    async def search(self, query: str, limit: Optional[int] = 20, include_ens_profiles: Optional[bool] = None) -> Any:
        return await self.run("search", {"query": query, "limit": limit}, include_ens_profiles)

    async def fetch_entity(self, entity_id: str, include_ens_profiles: Optional[bool] = None) -> Any:
        return await self.run("fetch_entity", {"entity_id": entity_id}, include_ens_profiles)

    async def search_collections(
        self,
        query: str,
        chain: Optional[str] = None,
        limit: Optional[int] = 20,
        include_ens_profiles: Optional[bool] = None,
    ) -> Any:
        return await self.run(
            "search_collections",
            {"query": query, "chain": chain, "limit": limit},
            include_ens_profiles,
        )

    async def get_collection(self, collection_slug: str, include_ens_profiles: Optional[bool] = None) -> Any:
        return await self.run("get_collection", {"collection_slug": collection_slug}, include_ens_profiles)

    async def search_items(
        self,
        query: str,
        collection: Optional[str] = None,
        traits: Optional[Dict[str, str]] = None,
        limit: Optional[int] = 20,
        include_ens_profiles: Optional[bool] = None,
    ) -> Any:
        return await self.run(
            "search_items",
            {"query": query, "collection": collection, "traits": traits, "limit": limit},
            include_ens_profiles,
        )

    async def get_item(
        self,
        contract_address: str,
        token_id: str,
        include_orders: Optional[bool] = False,
        include_ens_profiles: Optional[bool] = None,
    ) -> Any:
        return await self.run(
            "get_item",
            {"contract_address": contract_address, "token_id": token_id, "include_orders": include_orders},
            include_ens_profiles,
        )

    async def search_tokens(self, query: str, chain: Optional[str] = None, limit: Optional[int] = 20) -> Any:
        return await self.run("search_tokens", {"query": query, "chain": chain, "limit": limit})

    async def get_token(self, address: str, chain: Optional[str] = None) -> Any:
        return await self.run("get_token", {"address": address, "chain": chain})

    async def get_token_swap_quote(
        self,
        from_token: str,
        to_token: str,
        amount: str,
        from_address: str,
        chain: Optional[str] = None,
    ) -> Any:
        return await self.run(
            "get_token_swap_quote",
            {
                "from_token": from_token,
                "to_token": to_token,
                "amount": amount,
                "from_address": from_address,
                "chain": chain,
            },
        )

    async def get_token_balances(
        self,
        address: str,
        chain: Optional[str] = None,
        include_nfts: Optional[bool] = True,
    ) -> Any:
        return await self.run(
            "get_token_balances",
            {"address": address, "chain": chain, "include_nfts": include_nfts},
        )


__all__ = [
    "OpenSeaToolInvoker",
    "OpenSeaTools",
    "OpenSeaTool",
    "OPENSEA_TOOLS",
    "KNOWN_OPERATIONS",
    "KNOWN_OPERATIONS_VERSION",
    "known_operations",
]

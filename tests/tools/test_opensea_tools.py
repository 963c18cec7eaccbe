"""
Tests for the OpenSea tool invoker and chat-facing tool functions.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from walletlens.config import Settings
from walletlens.errors import (
    ConfigurationError,
    NoMatchingResponse,
    ProtocolError,
    TransportError,
)
from walletlens.providers.opensea_mcp import OpenSeaMCPClient
from walletlens.services.enhancer import ADDRESS_COUNT_KEY, ENS_DATA_KEY, ENSEnhancer
from walletlens.services.ens_resolver import ENSResolver
from walletlens.tools.opensea import (
    CALL_TOOL_METHOD,
    KNOWN_OPERATIONS,
    LIST_TOOLS_METHOD,
    OPENSEA_TOOLS,
    OpenSeaToolInvoker,
    OpenSeaTools,
    failure_payload,
    known_operations,
)

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def make_client(configured: bool = True) -> MagicMock:
    client = MagicMock(spec=OpenSeaMCPClient)
    client.is_configured = configured
    client.connect = AsyncMock()
    client.invoke = AsyncMock()
    return client


# =============================================================================
# Invoker
# =============================================================================

class TestListOperations:

    @pytest.mark.asyncio
    async def test_remote_listing(self):
        client = make_client()
        client.invoke.return_value = {"tools": [{"name": "search", "description": "remote"}]}

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert tools == [{"name": "search", "description": "remote"}]
        client.invoke.assert_awaited_once_with(LIST_TOOLS_METHOD, {})

    @pytest.mark.asyncio
    async def test_unconfigured_serves_catalog_without_network(self):
        client = make_client(configured=False)

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert [tool["name"] for tool in tools] == [op["name"] for op in KNOWN_OPERATIONS]
        client.invoke.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            TransportError("HTTP 502: bad gateway", status_code=502),
            ProtocolError("MCP Tool Error: nope"),
            NoMatchingResponse("nothing"),
        ],
    )
    async def test_failures_fall_back_to_catalog(self, error):
        client = make_client()
        client.invoke.side_effect = error

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert len(tools) == len(KNOWN_OPERATIONS)

    @pytest.mark.asyncio
    async def test_unreachable_endpoint_serves_catalog(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = OpenSeaMCPClient(
            Settings(_env_file=None, opensea_mcp_token="tok"),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)),
        )

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert len(tools) >= 1
        assert tools == known_operations()

    @pytest.mark.asyncio
    async def test_invalid_url_serves_catalog(self):
        client = OpenSeaMCPClient(
            Settings(_env_file=None, opensea_mcp_token="tok", opensea_mcp_url="http://[::1"),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500))),
        )

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert tools == known_operations()
        assert client.connected is False

    @pytest.mark.asyncio
    async def test_unexpected_error_serves_catalog(self):
        client = make_client()
        client.invoke.side_effect = RuntimeError("decoder bug")

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert tools == known_operations()

    @pytest.mark.asyncio
    async def test_malformed_listing_falls_back(self):
        client = make_client()
        client.invoke.return_value = {"tools": "not-a-list"}

        tools = await OpenSeaToolInvoker(client).list_operations()

        assert len(tools) == len(KNOWN_OPERATIONS)

    def test_catalog_copies_are_independent(self):
        tools = known_operations()
        tools[0]["name"] = "mutated"

        assert KNOWN_OPERATIONS[0]["name"] == "search"


class TestCallOperation:

    @pytest.mark.asyncio
    async def test_call_sends_name_and_arguments(self):
        client = make_client()
        client.invoke.return_value = {"content": [{"type": "text", "text": "ok"}]}

        result = await OpenSeaToolInvoker(client).call_operation("search", {"query": "punks"})

        assert result == {"content": [{"type": "text", "text": "ok"}]}
        client.connect.assert_awaited_once()
        client.invoke.assert_awaited_once_with(
            CALL_TOOL_METHOD, {"name": "search", "arguments": {"query": "punks"}}
        )

    @pytest.mark.asyncio
    async def test_unconfigured_raises(self):
        with pytest.raises(ConfigurationError):
            await OpenSeaToolInvoker(make_client(configured=False)).call_operation("search")

    @pytest.mark.asyncio
    async def test_errors_propagate_with_context(self):
        client = make_client()
        client.invoke.side_effect = ProtocolError("MCP Tool Error: rate limited", code=429)

        with pytest.raises(ProtocolError) as exc_info:
            await OpenSeaToolInvoker(client).call_operation("get_item", {})

        assert "get_item" in str(exc_info.value)
        assert "rate limited" in str(exc_info.value)
        assert exc_info.value.code == 429


# =============================================================================
# Chat-facing tools
# =============================================================================

def make_tools(client: MagicMock, stub_endpoint) -> OpenSeaTools:
    resolver = ENSResolver([stub_endpoint("primary", names={VITALIK: "vitalik.eth"})])
    return OpenSeaTools(OpenSeaToolInvoker(client), ENSEnhancer(resolver))


class TestOpenSeaTools:

    @pytest.mark.asyncio
    async def test_unset_arguments_dropped(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {"collections": []}
        tools = make_tools(client, stub_endpoint)

        await tools.search_collections("penguins")

        client.invoke.assert_awaited_once_with(
            CALL_TOOL_METHOD,
            {"name": "search_collections", "arguments": {"query": "penguins", "limit": 20}},
        )

    @pytest.mark.asyncio
    async def test_fetch_entity_uses_remote_name(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {}
        tools = make_tools(client, stub_endpoint)

        await tools.fetch_entity("collection:pudgypenguins")

        _, params = client.invoke.await_args.args
        assert params["name"] == "fetch"

    @pytest.mark.asyncio
    async def test_results_enhanced_with_names(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {"owner": VITALIK}
        tools = make_tools(client, stub_endpoint)

        result = await tools.search("vitalik's nfts")

        assert result[ADDRESS_COUNT_KEY] == 1
        assert result[ENS_DATA_KEY][VITALIK.lower()] == {"name": "vitalik.eth", "avatar": None}

    @pytest.mark.asyncio
    async def test_profile_tools_default_to_full_profiles(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {"owner": VITALIK}
        tools = make_tools(client, stub_endpoint)

        result = await tools.get_item("0x" + "bc" * 20, "1")

        assert "loading" in result[ENS_DATA_KEY][VITALIK.lower()]

    @pytest.mark.asyncio
    async def test_explicit_flag_overrides_default(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {"owner": VITALIK}
        tools = make_tools(client, stub_endpoint)

        result = await tools.get_collection("pudgypenguins", include_ens_profiles=False)

        assert result[ENS_DATA_KEY][VITALIK.lower()] == {"name": "vitalik.eth", "avatar": None}

    @pytest.mark.asyncio
    async def test_token_tools_not_enhanced(self, stub_endpoint):
        client = make_client()
        client.invoke.return_value = {"owner": VITALIK, "balance": "1"}
        tools = make_tools(client, stub_endpoint)

        result = await tools.get_token_balances(VITALIK)

        assert result == {"owner": VITALIK, "balance": "1"}

    @pytest.mark.asyncio
    async def test_failure_becomes_generic_payload(self, stub_endpoint):
        client = make_client()
        client.invoke.side_effect = TransportError("HTTP 500: stack trace with secrets", status_code=500)
        tools = make_tools(client, stub_endpoint)

        result = await tools.search("anything")

        assert result["error"] is True
        assert result["message"].startswith("Failed to search OpenSea")
        assert "secrets" not in result["message"]

    @pytest.mark.asyncio
    async def test_unconfigured_payload(self, stub_endpoint):
        tools = make_tools(make_client(configured=False), stub_endpoint)

        result = await tools.get_token("0x" + "bc" * 20)

        assert result == failure_payload("get token", ConfigurationError("missing"))
        assert "not configured" in result["message"]

    @pytest.mark.asyncio
    async def test_unknown_tool_raises_key_error(self, stub_endpoint):
        tools = make_tools(make_client(), stub_endpoint)

        with pytest.raises(KeyError):
            await tools.run("delete_everything")

    def test_registry_covers_catalog(self):
        remote_names = {tool.remote_name for tool in OPENSEA_TOOLS.values()}
        assert remote_names == {op["name"] for op in KNOWN_OPERATIONS}

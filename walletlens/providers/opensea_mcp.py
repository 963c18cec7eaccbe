"""
Async client for the OpenSea MCP server (JSON-RPC over streamable HTTP).

One instance owns one logical session: the ``initialize`` handshake assigns a
session id via the ``Mcp-Session-Id`` response header, and every later request
carries it back. Replies are either a single JSON envelope or an event stream
whose ``data:`` lines are correlated by request id.

Example usage:
    client = OpenSeaMCPClient(settings)
    await client.connect()
    tools = await client.invoke("tools/list")
    await client.aclose()
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, settings as default_settings
from ..errors import (
    ConfigurationError,
    NoMatchingResponse,
    TransportError,
    WalletLensError,
)
from .jsonrpc import (
    JSON_CONTENT_TYPE,
    SSE_CONTENT_TYPE,
    RpcFailure,
    RpcOutcome,
    RpcRequest,
    decode_envelope,
    decode_event_stream,
    find_by_id,
    is_event_stream,
)

logger = logging.getLogger(__name__)

MCP_SESSION_ID = "Mcp-Session-Id"
INITIALIZE_METHOD = "initialize"


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


class OpenSeaMCPClient:
    """Session-aware JSON-RPC client for one MCP endpoint.

    Not safe for concurrent mutation from several tasks during ``connect``;
    callers that need ordering must serialize themselves.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or default_settings
        self.endpoint_url: Optional[str] = self.settings.mcp_endpoint
        self.timeout = self.settings.mcp_timeout_seconds

        self.session_id: Optional[str] = None
        self.state = SessionState.UNINITIALIZED
        self._next_request_id = 1

        self._client = http_client
        self._owns_client = http_client is None

        if not self.is_configured:
            logger.warning("OpenSea MCP token not configured - tools will be unavailable")

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint_url)

    @property
    def connected(self) -> bool:
        return self.state == SessionState.CONNECTED

    def _headers(self, include_session: bool = True) -> Dict[str, str]:
        headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": f"{JSON_CONTENT_TYPE}, {SSE_CONTENT_TYPE}",
        }
        # Explicit URL override means the token is not embedded in the path
        if self.settings.opensea_mcp_url and self.settings.opensea_mcp_token:
            headers["Authorization"] = f"Bearer {self.settings.opensea_mcp_token}"
        if include_session and self.session_id:
            headers[MCP_SESSION_ID] = self.session_id
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    def _new_request(self, method: str, params: Optional[Dict[str, Any]]) -> RpcRequest:
        request = RpcRequest(id=self._next_request_id, method=method, params=params or {})
        self._next_request_id += 1
        return request

    async def _post(self, request: RpcRequest, *, include_session: bool) -> httpx.Response:
        if not self.endpoint_url:
            raise ConfigurationError("OpenSea MCP token not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                self.endpoint_url,
                json=request.envelope(),
                headers=self._headers(include_session=include_session),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request '{request.method}' timed out after {self.timeout}s") from exc
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Invalid OpenSea MCP URL: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request '{request.method}' failed: {exc}") from exc

        if response.is_error:
            raise TransportError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    @staticmethod
    def _decode_json_body(response: httpx.Response) -> Optional[RpcOutcome]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(f"Malformed JSON response: {exc}") from exc
        return decode_envelope(payload)

    async def connect(self) -> None:
        """Perform the initialize handshake unless already connected."""
        if self.connected:
            return

        if not self.is_configured:
            raise ConfigurationError("OpenSea MCP token not configured")

        self.state = SessionState.CONNECTING
        try:
            logger.info("Initializing OpenSea MCP connection")
            request = self._new_request(
                INITIALIZE_METHOD,
                {
                    "protocolVersion": self.settings.mcp_protocol_version,
                    "capabilities": {},
                    "clientInfo": {
                        "name": self.settings.mcp_client_name,
                        "version": self.settings.mcp_client_version,
                    },
                },
            )
            # No session exists yet, so never send the header on handshake
            response = await self._post(request, include_session=False)

            session_id = response.headers.get(MCP_SESSION_ID)
            if session_id:
                self.session_id = session_id
                logger.info("Extracted MCP session id from server")
            else:
                logger.warning("No session id found in handshake response headers")

            self._check_handshake(response, request.id)
        except WalletLensError as exc:
            self._reset(SessionState.FAILED)
            logger.error("Failed to connect to OpenSea MCP: %s", exc)
            raise exc.with_context("OpenSea MCP connection failed") from exc
        except BaseException:
            self._reset(SessionState.FAILED)
            raise

        self.state = SessionState.CONNECTED
        logger.info("OpenSea MCP initialized successfully")

    def _check_handshake(self, response: httpx.Response, request_id: int) -> None:
        if is_event_stream(response.headers.get("content-type")):
            outcomes = decode_event_stream(response.text)
            for outcome in outcomes:
                if isinstance(outcome, RpcFailure):
                    raise outcome.to_error("MCP Initialize Error")
                if outcome.id == request_id:
                    return
            # Some servers never echo the initialize result on the stream
            logger.debug("Handshake stream had no matching envelope; assuming success")
            return

        outcome = self._decode_json_body(response)
        if isinstance(outcome, RpcFailure):
            raise outcome.to_error("MCP Initialize Error")

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request on the current session and return its ``result``."""
        if not self.connected:
            await self.connect()

        request = self._new_request(method, params)
        try:
            response = await self._post(request, include_session=True)
        except TransportError as exc:
            if exc.status_code == 404 and self.session_id:
                logger.warning("MCP session expired; will reinitialize on next call")
                self._reset(SessionState.DISCONNECTED)
            raise

        if is_event_stream(response.headers.get("content-type")):
            outcome = find_by_id(decode_event_stream(response.text), request.id)
            if outcome is None:
                raise NoMatchingResponse(
                    f"No valid response for request {request.id} found in event stream",
                    request_id=request.id,
                )
        else:
            outcome = self._decode_json_body(response)
            if outcome is None:
                raise NoMatchingResponse(
                    f"Response to request {request.id} is not a JSON-RPC envelope",
                    request_id=request.id,
                )
            if outcome.id is not None and outcome.id != request.id:
                raise NoMatchingResponse(
                    f"Response id {outcome.id} does not match request {request.id}",
                    request_id=request.id,
                )

        if isinstance(outcome, RpcFailure):
            raise outcome.to_error("MCP Tool Error")
        return outcome.result

    def _reset(self, state: SessionState) -> None:
        self.session_id = None
        self.state = state

    async def disconnect(self) -> None:
        """Forget the session locally; the protocol has no logout call."""
        self._reset(SessionState.DISCONNECTED)

    async def aclose(self) -> None:
        await self.disconnect()
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


__all__ = ["OpenSeaMCPClient", "SessionState", "MCP_SESSION_ID"]

"""
Read-only ENS lookups against a single Ethereum JSON-RPC endpoint.

Every lookup is a plain ``eth_call``: the ENS registry gives us the resolver
for a node, and the resolver answers ``name``, ``addr`` and ``text`` queries.
Calldata is encoded by hand; selectors and namehashes use keccak from
eth_utils.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from eth_utils import keccak, to_checksum_address

from ..errors import ProtocolError, TransportError
from .base import NameServiceEndpoint

logger = logging.getLogger(__name__)

ENS_REGISTRY_ADDRESS = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"
ZERO_ADDRESS = "0x" + "0" * 40

IPFS_GATEWAY = "https://ipfs.io/ipfs/"
ARWEAVE_GATEWAY = "https://arweave.net/"

RESOLVER_MEMO_LIMIT = 1024


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _selector_from_signature(signature: str) -> str:
    return keccak(text=signature)[:4].hex()


RESOLVER_SELECTOR = _selector_from_signature("resolver(bytes32)")
NAME_SELECTOR = _selector_from_signature("name(bytes32)")
ADDR_SELECTOR = _selector_from_signature("addr(bytes32)")
TEXT_SELECTOR = _selector_from_signature("text(bytes32,string)")


def normalize_ens_name(name: str) -> str:
    return name.strip().lower()


def namehash(name: str) -> str:
    """ENS namehash of ``name`` as a 64-char hex string (no 0x)."""
    node = b"\x00" * 32
    normalized = normalize_ens_name(name)
    if normalized:
        for label in reversed(normalized.split(".")):
            node = keccak(node + keccak(text=label))
    return node.hex()


def reverse_node(address: str) -> str:
    return namehash(f"{_strip_0x(address).lower()}.addr.reverse")


def _encode_uint(value: int) -> str:
    return hex(value)[2:].rjust(64, "0")


def _encode_string(value: str) -> str:
    raw = value.encode("utf-8")
    padded_len = ((len(raw) + 31) // 32) * 32
    return _encode_uint(len(raw)) + raw.hex() + "00" * (padded_len - len(raw))


def _decode_address(data: str) -> Optional[str]:
    hex_data = _strip_0x(data)
    if len(hex_data) < 64:
        return None
    address = "0x" + hex_data[24:64]
    if address.lower() == ZERO_ADDRESS:
        return None
    return to_checksum_address(address)


def _decode_string(data: str) -> Optional[str]:
    hex_data = _strip_0x(data)
    if not hex_data:
        return None
    try:
        offset = int(hex_data[0:64], 16) * 2
        length = int(hex_data[offset:offset + 64], 16) * 2
        start = offset + 64
        if len(hex_data) < start + length:
            raise ValueError("string data truncated")
        value = bytes.fromhex(hex_data[start:start + length]).decode("utf-8")
    except ValueError as exc:
        raise ProtocolError(f"Malformed ABI string: {exc}") from exc
    return value or None


def normalize_avatar_uri(uri: Optional[str]) -> Optional[str]:
    """Rewrite decentralized-storage avatar URIs to HTTPS gateways.

    NFT avatars (``eip155:...``) are returned untouched.
    """
    if not uri:
        return None
    value = uri.strip()
    if value.startswith("ipfs://"):
        path = value[len("ipfs://"):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return IPFS_GATEWAY + path
    if value.startswith("ar://"):
        return ARWEAVE_GATEWAY + value[len("ar://"):]
    return value or None


class EthereumRpcClient(NameServiceEndpoint):
    """ENS reads through one JSON-RPC URL.

    Any network failure, non-2xx status or JSON-RPC error surfaces as an
    exception; an unset record surfaces as None.
    """

    def __init__(self, url: str, http_client: httpx.AsyncClient, timeout_s: float = 8.0):
        self.url = url
        self.name = url
        self.timeout_s = timeout_s
        self._client = http_client
        self._resolvers: Dict[str, Optional[str]] = {}

    def __repr__(self) -> str:
        return f"EthereumRpcClient({self.url!r})"

    async def eth_call(self, to: str, data: str) -> str:
        payload = {
            "jsonrpc": "2.0",
            "method": "eth_call",
            "params": [{"to": to, "data": "0x" + _strip_0x(data)}, "latest"],
            "id": 1,
        }
        try:
            response = await self._client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            body: Dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP {exc.response.status_code} from {self.url}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Malformed JSON from {self.url}: {exc}") from exc

        if not isinstance(body, dict):
            raise ProtocolError(f"Unexpected eth_call reply from {self.url}")
        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProtocolError(f"eth_call error: {message}")
        result = body.get("result")
        return result if isinstance(result, str) else "0x"

    async def get_resolver(self, node: str) -> Optional[str]:
        result = await self.eth_call(ENS_REGISTRY_ADDRESS, RESOLVER_SELECTOR + node)
        return _decode_address(result)

    async def get_name(self, address: str) -> Optional[str]:
        """Reverse record for ``address``, verified against its forward record."""
        node = reverse_node(address)
        resolver = await self.get_resolver(node)
        if resolver is None:
            return None

        name = _decode_string(await self.eth_call(resolver, NAME_SELECTOR + node))
        if not name:
            return None

        forward = await self.get_address(name)
        if forward is None or forward.lower() != address.lower():
            logger.debug("Reverse record %s for %s failed forward verification", name, address)
            return None
        return name

    async def get_address(self, name: str) -> Optional[str]:
        node = namehash(name)
        resolver = await self.get_resolver(node)
        if resolver is None:
            return None
        return _decode_address(await self.eth_call(resolver, ADDR_SELECTOR + node))

    def reset(self) -> None:
        self._resolvers.clear()

    async def _resolver_for_name(self, node: str) -> Optional[str]:
        # Profile fan-out asks for ~11 records of one name; look the resolver up once
        if node in self._resolvers:
            return self._resolvers[node]
        resolver = await self.get_resolver(node)
        if resolver is not None:
            if len(self._resolvers) >= RESOLVER_MEMO_LIMIT:
                self._resolvers.clear()
            self._resolvers[node] = resolver
        return resolver

    async def get_text(self, name: str, key: str) -> Optional[str]:
        node = namehash(name)
        resolver = await self._resolver_for_name(node)
        if resolver is None:
            return None
        data = TEXT_SELECTOR + node + _encode_uint(64) + _encode_string(key)
        return _decode_string(await self.eth_call(resolver, data))

    async def get_avatar(self, name: str) -> Optional[str]:
        return normalize_avatar_uri(await self.get_text(name, "avatar"))


__all__ = [
    "EthereumRpcClient",
    "ENS_REGISTRY_ADDRESS",
    "namehash",
    "reverse_node",
    "normalize_avatar_uri",
    "normalize_ens_name",
]

"""
JSON-RPC 2.0 envelope helpers shared by the MCP client.

Replies arrive either as a single ``application/json`` document or as a
``text/event-stream`` body where every ``data: `` line carries one envelope.
Decoded envelopes are returned as ``RpcSuccess`` or ``RpcFailure`` so callers
never read ``result`` from an error reply or vice versa.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from ..errors import ProtocolError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
JSON_CONTENT_TYPE = "application/json"
SSE_CONTENT_TYPE = "text/event-stream"
SSE_DATA_PREFIX = "data: "


@dataclass(frozen=True)
class RpcSuccess:
    id: Optional[int]
    result: Any


@dataclass(frozen=True)
class RpcFailure:
    id: Optional[int]
    message: str
    code: Optional[int] = None
    data: Any = None

    def to_error(self, prefix: str = "MCP Error") -> ProtocolError:
        return ProtocolError(f"{prefix}: {self.message}", code=self.code, data=self.data)


RpcOutcome = Union[RpcSuccess, RpcFailure]


@dataclass
class RpcRequest:
    """One pending request; lives only for the duration of a round trip."""

    id: int
    method: str
    params: Dict[str, Any] = field(default_factory=dict)

    def envelope(self) -> Dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "method": self.method,
            "id": self.id,
            "params": self.params,
        }


def decode_envelope(payload: Any) -> Optional[RpcOutcome]:
    """Classify a parsed JSON value as success, failure, or neither.

    Returns None for anything that is not a response envelope (notifications,
    server-initiated requests, scalars).
    """
    if not isinstance(payload, dict):
        return None

    envelope_id = payload.get("id")
    if not isinstance(envelope_id, int) or isinstance(envelope_id, bool):
        envelope_id = None

    error = payload.get("error")
    if error is not None:
        if isinstance(error, dict):
            message = str(error.get("message") or "Unknown error")
            code = error.get("code") if isinstance(error.get("code"), int) else None
            return RpcFailure(id=envelope_id, message=message, code=code, data=error.get("data"))
        return RpcFailure(id=envelope_id, message=str(error))

    if "result" in payload:
        return RpcSuccess(id=envelope_id, result=payload["result"])

    return None


def iter_event_stream(text: str) -> Iterator[Any]:
    """Yield the JSON value of every ``data: `` line; malformed lines are skipped."""
    for raw_line in text.splitlines():
        line = raw_line.rstrip("\r")
        if not line.startswith(SSE_DATA_PREFIX):
            continue
        try:
            yield json.loads(line[len(SSE_DATA_PREFIX):])
        except ValueError:
            continue


def decode_event_stream(text: str) -> List[RpcOutcome]:
    """Decode every response envelope found in an event-stream body, in order."""
    outcomes: List[RpcOutcome] = []
    for payload in iter_event_stream(text):
        outcome = decode_envelope(payload)
        if outcome is not None:
            outcomes.append(outcome)
    return outcomes


def find_by_id(outcomes: List[RpcOutcome], request_id: int) -> Optional[RpcOutcome]:
    for outcome in outcomes:
        if outcome.id == request_id:
            return outcome
    return None


def is_event_stream(content_type: Optional[str]) -> bool:
    return bool(content_type) and SSE_CONTENT_TYPE in content_type.lower()


__all__ = [
    "RpcSuccess",
    "RpcFailure",
    "RpcOutcome",
    "RpcRequest",
    "decode_envelope",
    "iter_event_stream",
    "decode_event_stream",
    "find_by_id",
    "is_event_stream",
    "JSONRPC_VERSION",
    "JSON_CONTENT_TYPE",
    "SSE_CONTENT_TYPE",
]

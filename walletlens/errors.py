"""
Error taxonomy for the marketplace client and the ENS resolution layer.

ConfigurationError is static misconfiguration and is never retried.
TransportError covers network and HTTP failures. ProtocolError is a
well-formed reply carrying an explicit JSON-RPC error object.
NoMatchingResponse means an event stream ended without the envelope we
were waiting for. ResolutionExhausted is raised internally by the resolver
when every endpoint failed; callers only ever see its negative result.

"No ENS name bound to this address" is not an error: it is a None result.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, List, Optional


class WalletLensError(Exception):
    """Base class for all errors raised by the core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def with_context(self, context: str) -> "WalletLensError":
        """Return a copy of this error with ``context`` prefixed to the message."""
        wrapped = copy.copy(self)
        wrapped.message = f"{context}: {self.message}"
        wrapped.args = (wrapped.message,)
        return wrapped

    def __str__(self) -> str:
        return self.message


class ConfigurationError(WalletLensError):
    """Missing credential or endpoint."""


class TransportError(WalletLensError):
    """Network failure or non-2xx HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProtocolError(WalletLensError):
    """The remote side answered with an explicit JSON-RPC error object."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class NoMatchingResponse(WalletLensError):
    """No envelope carrying the expected request id was found in the reply."""

    def __init__(self, message: str, request_id: Optional[int] = None):
        super().__init__(message)
        self.request_id = request_id


@dataclass(frozen=True)
class EndpointAttempt:
    """One failed lookup against one resolution endpoint."""

    endpoint: str
    error: BaseException

    def describe(self) -> str:
        return f"{self.endpoint}: {type(self.error).__name__}: {self.error}"


class ResolutionExhausted(WalletLensError):
    """Every resolution endpoint raised; the individual failures are attached."""

    def __init__(self, message: str, attempts: Optional[List[EndpointAttempt]] = None):
        self.attempts: List[EndpointAttempt] = list(attempts or [])
        if self.attempts:
            details = "; ".join(attempt.describe() for attempt in self.attempts)
            message = f"{message} ({details})"
        super().__init__(message)


__all__ = [
    "WalletLensError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "NoMatchingResponse",
    "EndpointAttempt",
    "ResolutionExhausted",
]

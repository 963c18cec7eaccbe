"""Shared stub naming-service endpoints."""

from typing import Dict, Optional

import pytest

from walletlens.errors import TransportError
from walletlens.providers.base import NameServiceEndpoint


class StubEndpoint(NameServiceEndpoint):
    """In-memory endpoint; ``fail=True`` makes every lookup raise."""

    def __init__(
        self,
        name: str,
        names: Optional[Dict[str, str]] = None,
        addresses: Optional[Dict[str, str]] = None,
        texts: Optional[Dict[str, Dict[str, str]]] = None,
        avatars: Optional[Dict[str, str]] = None,
        fail: bool = False,
    ):
        self.name = name
        self.names = {k.lower(): v for k, v in (names or {}).items()}
        self.addresses = addresses or {}
        self.texts = texts or {}
        self.avatars = avatars or {}
        self.fail = fail
        self.calls = []

    def _record(self, method: str, *args):
        self.calls.append((method, *args))
        if self.fail:
            raise TransportError(f"{self.name} unavailable")

    async def get_name(self, address: str) -> Optional[str]:
        self._record("get_name", address)
        return self.names.get(address.lower())

    async def get_address(self, name: str) -> Optional[str]:
        self._record("get_address", name)
        return self.addresses.get(name)

    async def get_text(self, name: str, key: str) -> Optional[str]:
        self._record("get_text", name, key)
        return self.texts.get(name, {}).get(key)

    async def get_avatar(self, name: str) -> Optional[str]:
        self._record("get_avatar", name)
        return self.avatars.get(name)


@pytest.fixture
def stub_endpoint():
    return StubEndpoint

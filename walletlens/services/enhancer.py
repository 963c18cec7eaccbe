"""Attach ENS identity data to arbitrary marketplace payloads."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from .address import is_valid_evm_address
from .ens_resolver import ENSResolver

logger = logging.getLogger(__name__)

ENS_DATA_KEY = "_ensData"
ADDRESS_COUNT_KEY = "_addressCount"


def extract_addresses(payload: Any) -> List[str]:
    """Every address-shaped string anywhere in ``payload``, deduplicated.

    Duplicates are detected case-insensitively; the first spelling wins.
    """
    found: List[str] = []
    seen = set()

    def traverse(node: Any) -> None:
        if isinstance(node, str):
            if is_valid_evm_address(node) and node.lower() not in seen:
                seen.add(node.lower())
                found.append(node)
        elif isinstance(node, Mapping):
            for value in node.values():
                traverse(value)
        elif isinstance(node, (list, tuple)):
            for item in node:
                traverse(item)

    traverse(payload)
    return found


class ENSEnhancer:
    """Resolve the addresses in a payload and merge the result next to it."""

    def __init__(self, resolver: ENSResolver):
        self.resolver = resolver

    async def enhance(self, payload: Any, include_full_profiles: bool = False) -> Any:
        """Return a shallow copy of ``payload`` with ``_ensData``/``_addressCount``.

        Payloads without addresses (or that are not mappings) come back as-is.
        On any failure the original payload is returned.
        """
        if not isinstance(payload, Mapping):
            return payload

        addresses = extract_addresses(payload)
        if not addresses:
            return payload

        try:
            ens_data: Dict[str, Dict[str, Any]] = {}
            if include_full_profiles:
                profiles = await self.resolver.resolve_many_profiles(addresses)
                for address, profile in profiles.items():
                    ens_data[address] = profile.to_dict()
            else:
                names = await self.resolver.resolve_many(addresses)
                for address, name in names.items():
                    ens_data[address] = {"name": name, "avatar": None}
        except Exception:
            logger.exception("Failed to enhance payload with ENS data")
            return payload

        enhanced = dict(payload)
        enhanced[ENS_DATA_KEY] = ens_data
        enhanced[ADDRESS_COUNT_KEY] = len(addresses)
        return enhanced


__all__ = ["ENSEnhancer", "extract_addresses", "ENS_DATA_KEY", "ADDRESS_COUNT_KEY"]

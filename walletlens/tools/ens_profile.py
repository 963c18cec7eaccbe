"""ENS lookup tools: ENS name or address in, profile out."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..services.address import INPUT_ADDRESS, INPUT_ENS_NAME, classify_identity_input
from ..services.ens_resolver import ENSResolver
from ..types.identity import IdentityRecord, ResolutionState

PROFILE_FIELDS = (
    "name",
    "avatar",
    "description",
    "email",
    "url",
    "twitter",
    "github",
    "discord",
    "telegram",
    "contentHash",
)


def _profile_payload(profile: IdentityRecord, fallback_name: Optional[str] = None) -> Dict[str, Any]:
    data = profile.to_dict()
    payload = {field: data[field] for field in PROFILE_FIELDS}
    if fallback_name and not payload["name"]:
        payload["name"] = fallback_name
    return payload


async def resolve_ens_profile(resolver: ENSResolver, value: str) -> Dict[str, Any]:
    """Resolve an ENS name (like vitalik.eth) or an address to a full profile."""

    trimmed = (value or "").strip()
    kind = classify_identity_input(trimmed)

    if kind == INPUT_ADDRESS:
        profile = await resolver.resolve_profile(trimmed)
        if profile.state == ResolutionState.FAILED:
            return {
                "success": False,
                "error": profile.error,
                "input": trimmed,
                "type": "address_to_profile",
            }
        return {
            "success": True,
            "type": "address_to_profile",
            "input": trimmed,
            "address": trimmed,
            "ensName": profile.name,
            "profile": _profile_payload(profile),
            "hasENS": bool(profile.name),
        }

    if kind == INPUT_ENS_NAME:
        address = await resolver.resolve_address(trimmed)
        if not address:
            return {
                "success": False,
                "error": (
                    f'The ENS name "{trimmed}" could not be resolved. It may not exist, or there '
                    "might be a network issue. Please check the spelling or try again later."
                ),
                "input": trimmed,
                "type": "ens_name",
                "suggestion": (
                    "You can try searching for this person or entity using other methods, "
                    "or check if the ENS name is spelled correctly."
                ),
            }

        profile = await resolver.resolve_profile(address)
        return {
            "success": True,
            "type": "ens_to_profile",
            "input": trimmed,
            "ensName": trimmed,
            "address": address,
            "profile": _profile_payload(profile, fallback_name=trimmed),
            "hasENS": True,
        }

    return {
        "success": False,
        "error": "Input must be either an ENS name (e.g., vitalik.eth) or Ethereum address (0x...)",
        "input": trimmed,
    }


async def batch_resolve_ens(resolver: ENSResolver, values: List[str]) -> Dict[str, Any]:
    """Resolve several ENS names or addresses; one entry per input, in order."""

    results: List[Dict[str, Any]] = []
    for value in values:
        result = await resolve_ens_profile(resolver, value)
        if result["success"]:
            entry = {key: val for key, val in result.items() if key != "success"}
        else:
            entry = {
                "input": result["input"],
                "error": result["error"] if result.get("type") != "ens_name" else "ENS name not found",
                "hasENS": False,
            }
        results.append(entry)

    failed = sum(1 for entry in results if entry.get("error"))
    return {
        "success": True,
        "totalInputs": len(values),
        "resolved": len(results) - failed,
        "failed": failed,
        "results": results,
    }


__all__ = ["resolve_ens_profile", "batch_resolve_ens"]

"""Helpers for recognizing wallet addresses and ENS names in user input."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

INPUT_ADDRESS = "address"
INPUT_ENS_NAME = "ens_name"


@lru_cache(maxsize=1024)
def is_valid_evm_address(address: str) -> bool:
    if not address:
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(address))


def looks_like_ens_name(value: str) -> bool:
    if not value or is_valid_evm_address(value):
        return False
    labels = value.split(".")
    return len(labels) >= 2 and all(labels)


def classify_identity_input(value: str) -> Optional[str]:
    """Return INPUT_ADDRESS, INPUT_ENS_NAME, or None for anything else."""

    candidate = (value or "").strip()
    if is_valid_evm_address(candidate):
        return INPUT_ADDRESS
    if looks_like_ens_name(candidate):
        return INPUT_ENS_NAME
    return None


def format_address(address: str, ens_name: Optional[str] = None) -> str:
    """Display an address by its ENS name when one is known."""

    return ens_name or address


__all__ = [
    "INPUT_ADDRESS",
    "INPUT_ENS_NAME",
    "is_valid_evm_address",
    "looks_like_ens_name",
    "classify_identity_input",
    "format_address",
]

"""Service layer helpers"""

from .address import classify_identity_input, format_address, is_valid_evm_address
from .ens_cache import ResolutionCache
from .ens_resolver import ENSResolver
from .enhancer import ENSEnhancer, extract_addresses

__all__ = [
    "classify_identity_input",
    "format_address",
    "is_valid_evm_address",
    "ResolutionCache",
    "ENSResolver",
    "ENSEnhancer",
    "extract_addresses",
]

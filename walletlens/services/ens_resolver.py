"""
Multi-endpoint ENS resolution with a process-lifetime cache.

Endpoints are tried strictly in order (configured primary first, then the
public fallbacks). A failing endpoint is logged at debug level and skipped.
"No name bound" is a normal, cacheable outcome; only when every endpoint
raised do we record a failure, and even then callers get a negative result
rather than an exception.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

import httpx

from ..config import Settings
from ..errors import EndpointAttempt, ResolutionExhausted, WalletLensError
from ..providers.base import NameServiceEndpoint
from ..providers.ethereum_rpc import EthereumRpcClient, normalize_ens_name
from ..types.identity import IdentityRecord
from .address import is_valid_evm_address, looks_like_ens_name
from .ens_cache import ResolutionCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Text records fetched alongside the avatar for a full profile.
# twitter/github have a legacy un-namespaced key; the namespaced one wins.
PROFILE_TEXT_KEYS = (
    "description",
    "email",
    "url",
    "com.twitter",
    "twitter",
    "com.github",
    "github",
    "com.discord",
    "org.telegram",
    "contenthash",
)

# Failures an endpoint may raise that mean "try the next one"
ENDPOINT_ERRORS = (WalletLensError, httpx.HTTPError, asyncio.TimeoutError, ValueError)

PROFILE_FAILURE_MESSAGE = "ENS resolution is temporarily unavailable"


class ENSResolver:
    """Resolve addresses to names and profiles across redundant endpoints."""

    def __init__(
        self,
        endpoints: Sequence[NameServiceEndpoint],
        cache: Optional[ResolutionCache] = None,
        *,
        profile_timeout_s: float = 15.0,
        max_concurrency: int = 10,
    ):
        self.endpoints: List[NameServiceEndpoint] = list(endpoints)
        self.cache = cache if cache is not None else ResolutionCache()
        self.profile_timeout_s = profile_timeout_s
        self.max_concurrency = max_concurrency

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        cache: Optional[ResolutionCache] = None,
    ) -> "ENSResolver":
        endpoints = [
            EthereumRpcClient(url, http_client, timeout_s=settings.ens_timeout_seconds)
            for url in settings.ens_rpc_urls
        ]
        return cls(
            endpoints,
            cache,
            profile_timeout_s=settings.ens_profile_timeout_seconds,
            max_concurrency=settings.max_concurrent_requests,
        )

    def flush(self) -> None:
        """Drop cached names and profiles along with per-endpoint memo state."""
        self.cache.flush()
        for endpoint in self.endpoints:
            endpoint.reset()

    async def _first_result(
        self,
        label: str,
        lookup: Callable[[NameServiceEndpoint], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        """Walk the endpoints in order and return the first non-empty answer.

        Raises ResolutionExhausted only when every endpoint raised.
        """
        attempts: List[EndpointAttempt] = []
        for endpoint in self.endpoints:
            try:
                value = await lookup(endpoint)
            except ENDPOINT_ERRORS as exc:
                logger.debug("ENS %s failed with endpoint %s: %s", label, endpoint.name, exc)
                attempts.append(EndpointAttempt(endpoint=endpoint.name, error=exc))
                continue
            if value:
                return value

        if self.endpoints and len(attempts) == len(self.endpoints):
            raise ResolutionExhausted(f"ENS {label} failed on all endpoints", attempts)
        return None

    async def _lookup_name(self, address: str) -> Optional[str]:
        return await self._first_result(
            f"reverse lookup for {address}",
            lambda endpoint: endpoint.get_name(address),
        )

    async def resolve_name(self, address: str) -> Optional[str]:
        """Primary ENS name for ``address``, or None."""
        if not is_valid_evm_address(address):
            return None

        if self.cache.has_name(address):
            return self.cache.get_name(address)

        try:
            name = await self._lookup_name(address)
        except ResolutionExhausted as exc:
            logger.warning("%s", exc)
            name = None

        self.cache.put_name(address, name)
        return name

    async def resolve_address(self, name: str) -> Optional[str]:
        """Address an ENS name points to, or None."""
        normalized = normalize_ens_name(name)
        if not looks_like_ens_name(normalized):
            return None
        try:
            return await self._first_result(
                f"forward lookup for {normalized}",
                lambda endpoint: endpoint.get_address(normalized),
            )
        except ResolutionExhausted as exc:
            logger.warning("%s", exc)
            return None

    async def resolve_avatar(self, name: str) -> Optional[str]:
        normalized = normalize_ens_name(name)
        try:
            return await self._first_result(
                f"avatar lookup for {normalized}",
                lambda endpoint: endpoint.get_avatar(normalized),
            )
        except ResolutionExhausted as exc:
            logger.warning("%s", exc)
            return None

    async def _fetch_profile_fields(self, endpoint: NameServiceEndpoint, name: str) -> Dict[str, str]:
        lookups: Dict[str, Awaitable[Optional[str]]] = {"avatar": endpoint.get_avatar(name)}
        for key in PROFILE_TEXT_KEYS:
            lookups[key] = endpoint.get_text(name, key)

        results = await asyncio.gather(*lookups.values(), return_exceptions=True)

        values: Dict[str, str] = {}
        for key, result in zip(lookups.keys(), results):
            if isinstance(result, BaseException):
                logger.debug("ENS %s record for %s failed on %s: %s", key, name, endpoint.name, result)
                continue
            if result:
                values[key] = result
        return values

    async def _lookup_profile(self, name: str) -> IdentityRecord:
        values: Dict[str, str] = {}
        for endpoint in self.endpoints:
            try:
                values = await asyncio.wait_for(
                    self._fetch_profile_fields(endpoint, name),
                    timeout=self.profile_timeout_s,
                )
            except asyncio.TimeoutError:
                logger.debug("ENS profile lookup for %s timed out on %s", name, endpoint.name)
                values = {}
                continue

            record = _record_from_fields(name, values)
            if record.has_profile_fields:
                return record

        return _record_from_fields(name, values)

    async def resolve_profile(self, address: str) -> IdentityRecord:
        """Full identity record for ``address``; never raises."""
        cached = self.cache.get_profile(address)
        if cached is not None:
            return cached

        if not is_valid_evm_address(address):
            return IdentityRecord()

        self.cache.mark_pending(address)
        try:
            profile = await self._resolve_profile_uncached(address)
        except BaseException:
            # Cancelled mid-lookup; the placeholder must not outlive the task
            self.cache.discard_pending(address)
            raise

        self.cache.put_profile(address, profile)
        return profile

    async def _resolve_profile_uncached(self, address: str) -> IdentityRecord:
        try:
            if self.cache.has_name(address):
                name = self.cache.get_name(address)
            else:
                try:
                    name = await self._lookup_name(address)
                except ResolutionExhausted:
                    self.cache.put_name(address, None)
                    raise
                self.cache.put_name(address, name)

            profile = await self._lookup_profile(name) if name else IdentityRecord()
        except ResolutionExhausted as exc:
            logger.warning("%s", exc)
            profile = IdentityRecord.failed(PROFILE_FAILURE_MESSAGE)
        except Exception:
            logger.exception("Unexpected error resolving ENS profile for %s", address)
            profile = IdentityRecord.failed(PROFILE_FAILURE_MESSAGE)
        return profile

    async def resolve_many(self, addresses: Iterable[str]) -> Dict[str, Optional[str]]:
        """Resolve names concurrently; one entry per lowercased address."""
        addresses = list(addresses)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def resolve_one(address: str) -> Optional[str]:
            async with semaphore:
                return await self.resolve_name(address)

        results = await asyncio.gather(
            *(resolve_one(address) for address in addresses),
            return_exceptions=True,
        )

        resolved: Dict[str, Optional[str]] = {}
        for address, result in zip(addresses, results):
            if isinstance(result, BaseException):
                logger.warning("ENS resolution failed for %s: %s", address, result)
                resolved[address.lower()] = None
            else:
                resolved[address.lower()] = result
        return resolved

    async def resolve_many_profiles(self, addresses: Iterable[str]) -> Dict[str, IdentityRecord]:
        """Resolve full profiles concurrently; a failure only affects its own address."""
        addresses = list(addresses)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def resolve_one(address: str) -> IdentityRecord:
            async with semaphore:
                return await self.resolve_profile(address)

        results = await asyncio.gather(
            *(resolve_one(address) for address in addresses),
            return_exceptions=True,
        )

        profiles: Dict[str, IdentityRecord] = {}
        for address, result in zip(addresses, results):
            if isinstance(result, BaseException):
                logger.warning("ENS profile resolution failed for %s: %s", address, result)
                profiles[address.lower()] = IdentityRecord.failed("Failed to resolve profile")
            else:
                profiles[address.lower()] = result
        return profiles


def _record_from_fields(name: str, values: Dict[str, str]) -> IdentityRecord:
    return IdentityRecord(
        name=name,
        avatar=values.get("avatar"),
        description=values.get("description"),
        email=values.get("email"),
        url=values.get("url"),
        twitter=values.get("com.twitter") or values.get("twitter"),
        github=values.get("com.github") or values.get("github"),
        discord=values.get("com.discord"),
        telegram=values.get("org.telegram"),
        content_hash=values.get("contenthash"),
    )


__all__ = ["ENSResolver", "PROFILE_TEXT_KEYS"]

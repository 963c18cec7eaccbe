"""
Process-wide service wiring.

The entry point (FastAPI lifespan or the CLI) builds one ``Services`` object,
hands it to whatever needs it, and closes it on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from .config import Settings, settings as default_settings
from .providers.opensea_mcp import OpenSeaMCPClient
from .services.ens_cache import ResolutionCache
from .services.ens_resolver import ENSResolver
from .services.enhancer import ENSEnhancer
from .tools.opensea import OpenSeaToolInvoker, OpenSeaTools


@dataclass
class Services:
    settings: Settings
    rpc_http: httpx.AsyncClient
    mcp_client: OpenSeaMCPClient
    invoker: OpenSeaToolInvoker
    cache: ResolutionCache
    resolver: ENSResolver
    enhancer: ENSEnhancer
    opensea: OpenSeaTools

    async def aclose(self) -> None:
        await self.mcp_client.aclose()
        await self.rpc_http.aclose()


def build_services(
    settings: Optional[Settings] = None,
    *,
    mcp_http: Optional[httpx.AsyncClient] = None,
    rpc_http: Optional[httpx.AsyncClient] = None,
) -> Services:
    settings = settings or default_settings
    rpc_http = rpc_http or httpx.AsyncClient(timeout=settings.ens_timeout_seconds)

    mcp_client = OpenSeaMCPClient(settings, http_client=mcp_http)
    invoker = OpenSeaToolInvoker(mcp_client)
    cache = ResolutionCache()
    resolver = ENSResolver.from_settings(settings, rpc_http, cache)
    enhancer = ENSEnhancer(resolver)

    return Services(
        settings=settings,
        rpc_http=rpc_http,
        mcp_client=mcp_client,
        invoker=invoker,
        cache=cache,
        resolver=resolver,
        enhancer=enhancer,
        opensea=OpenSeaTools(invoker, enhancer),
    )

import os

from pathlib import Path
from typing import Any, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

OPENSEA_MCP_BASE_URL = "https://mcp.opensea.io"

DEFAULT_ENS_FALLBACK_RPC_URLS = [
    "https://ethereum.publicnode.com",
    "https://rpc.ankr.com/eth",
    "https://eth.public-rpc.com",
    "https://ethereum.blockpi.network/v1/rpc/public",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.opensea_mcp_token:
            fallback = os.getenv("OPENSEA_ACCESS_TOKEN")
            if fallback:
                object.__setattr__(self, "opensea_mcp_token", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # OpenSea MCP
    opensea_mcp_token: str = Field(default="", description="OpenSea MCP access token")
    opensea_mcp_url: str = Field(
        default="",
        description="Explicit MCP endpoint; when set the token is sent as a bearer header",
    )
    mcp_protocol_version: str = Field(default="2024-11-05", description="MCP protocol version advertised on handshake")
    mcp_client_name: str = Field(default="opensea-chatbot", description="Client name sent on handshake")
    mcp_client_version: str = Field(default="1.0.0", description="Client version sent on handshake")
    mcp_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for each MCP HTTP call")

    # ENS resolution
    ethereum_rpc_url: str = Field(default="", description="Primary Ethereum RPC endpoint for ENS lookups")
    ens_fallback_rpc_urls: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ENS_FALLBACK_RPC_URLS),
        description="Public RPC endpoints tried after the primary, in order",
    )
    ens_timeout_seconds: float = Field(default=8.0, gt=0, description="Timeout for a single eth_call")
    ens_profile_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Budget for all profile field lookups against one endpoint",
    )

    # Rate Limiting
    max_concurrent_requests: int = Field(default=10, ge=1, description="Max concurrent resolution tasks")

    @property
    def has_opensea_token(self) -> bool:
        return bool(self.opensea_mcp_token)

    @property
    def mcp_endpoint(self) -> Optional[str]:
        """Endpoint the MCP client should talk to, or None when unconfigured."""
        if not self.opensea_mcp_token:
            return None
        if self.opensea_mcp_url:
            return self.opensea_mcp_url
        return f"{OPENSEA_MCP_BASE_URL}/{self.opensea_mcp_token}/mcp"

    @property
    def ens_rpc_urls(self) -> List[str]:
        """Primary endpoint first, then fallbacks, without duplicates."""
        urls: List[str] = []
        for url in [self.ethereum_rpc_url, *self.ens_fallback_rpc_urls]:
            if url and url not in urls:
                urls.append(url)
        return urls


# Global settings instance
settings = Settings()

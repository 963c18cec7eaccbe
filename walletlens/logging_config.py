"""
Structured logging configuration using structlog.

Produces JSON logs in production, human-readable colored logs in development.
The OpenSea token travels inside the default MCP URL, so every record is
scrubbed of it before rendering.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from .config import Settings, settings as default_settings

REDACTED = "***"


class SecretRedactor:
    """structlog processor that masks configured secrets in rendered fields."""

    def __init__(self, *secrets: str):
        self.secrets = [secret for secret in secrets if secret]

    def _scrub(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        for secret in self.secrets:
            value = value.replace(secret, REDACTED)
        return value

    def __call__(self, logger: Any, method_name: str, event_dict: dict) -> dict:
        if not self.secrets:
            return event_dict
        return {key: self._scrub(value) for key, value in event_dict.items()}


def setup_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Override log level (default: from settings.log_level)
        settings: Settings whose secrets should be redacted (default: process settings)
    """
    settings = settings or default_settings
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    shared_processors.append(SecretRedactor(settings.opensea_mcp_token))

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # MCP client and ENS resolver log through logging.getLogger(__name__)
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request URL at INFO, token included
    for name in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)

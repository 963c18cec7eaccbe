import logging

from walletlens.config import Settings
from walletlens.logging_config import REDACTED, SecretRedactor, setup_logging


def test_redactor_masks_token_in_every_string_field():
    redact = SecretRedactor("s3cret-token")

    event = redact(
        None,
        "error",
        {
            "event": "POST https://mcp.opensea.io/s3cret-token/mcp failed",
            "url": "https://mcp.opensea.io/s3cret-token/mcp",
            "status": 500,
        },
    )

    assert event["event"] == f"POST https://mcp.opensea.io/{REDACTED}/mcp failed"
    assert "s3cret-token" not in event["url"]
    assert event["status"] == 500


def test_redactor_without_secrets_is_passthrough():
    event = {"event": "hello"}

    assert SecretRedactor("")(None, "info", event) is event


def test_setup_logging_routes_stdlib_and_quiets_httpx():
    settings = Settings(_env_file=None, log_level="WARNING", opensea_mcp_token="tok")

    setup_logging(settings=settings)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert len(logging.getLogger().handlers) == 1

"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from facelift.config import Settings, get_settings


def _configure_logfire(settings: Settings, **extra: Any) -> None:
    logfire_config: dict[str, Any] = {"environment": settings.env, **extra}

    # Add token if provided (for cloud logging)
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token
    else:
        logfire_config["send_to_logfire"] = False

    logfire.configure(**logfire_config)
    logfire.instrument_pydantic()
    # AI observability for the generation stages
    logfire.instrument_pydantic_ai()


def _configure_stdlib_logging(settings: Settings) -> None:
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.env == "local":
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Logfire handles structured formatting
        logging.basicConfig(level=log_level, format="%(message)s")


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize Pydantic Logfire for the HTTP service.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic and PydanticAI instrumentation
    - Environment-aware stdlib logging
    """
    settings = get_settings()
    _configure_logfire(settings)
    logfire.instrument_fastapi(app)
    # Outbound scraping and site-map requests
    logfire.instrument_httpx()
    _configure_stdlib_logging(settings)

    logfire.info(
        "Logfire configured",
        environment=settings.env,
        scraper_key=mask_secret(settings.firecrawl_api_key),
        gateway_key=mask_secret(settings.pydantic_ai_gateway_api_key),
    )


def setup_cli_logging() -> None:
    """Configure Logfire for command-line runs (console output only unless a token is set)."""
    settings = get_settings()
    _configure_logfire(settings, console=logfire.ConsoleOptions(min_log_level="warn"))
    _configure_stdlib_logging(settings)


def mask_secret(value: str | None, mask_char: str = "*") -> str:
    """
    Mask a secret for logging, keeping the first and last two characters.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string ("" when unset)
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"

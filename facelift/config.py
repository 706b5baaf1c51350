"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from facelift.constants import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TIMEOUT_SECONDS,
    BLUEPRINT_MAX_TOKENS,
    BLUEPRINT_TIMEOUT_SECONDS,
    DEFAULT_MAX_SUBPAGES,
    DEFAULT_SCRAPER_BASE_URL,
    DESIGN_MAX_TOKENS,
    DESIGN_TIMEOUT_SECONDS,
    DIRECT_FETCH_TIMEOUT_SECONDS,
    SCRAPER_SERVICE_TIMEOUT_SECONDS,
    SITE_MAP_TIMEOUT_SECONDS,
    SUBPAGE_DIRECT_FETCH_TIMEOUT_SECONDS,
    SUBPAGE_SCRAPER_SERVICE_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Stdlib logging level")

    # Scraping service (Firecrawl-compatible)
    firecrawl_api_key: str | None = Field(
        default=None,
        description="Scraping service API key; direct fetch is used when absent",
    )
    firecrawl_base_url: str = Field(
        default=DEFAULT_SCRAPER_BASE_URL, description="Scraping service base URL"
    )

    # PydanticAI Gateway Configuration
    pydantic_ai_gateway_api_key: str | None = Field(
        default=None, description="PydanticAI Gateway API key (paig_xxx)"
    )
    default_model: str = Field(
        default="gateway/anthropic:claude-sonnet-4-5",
        description="Model used for content analysis and blueprint generation",
    )
    design_model: str = Field(
        default="google-gla:gemini-2.5-pro",
        description="Secondary model used for design consultation",
    )
    design_consultation_enabled: bool = Field(
        default=True, description="Whether to request a design guide"
    )

    analysis_max_tokens: int = Field(default=ANALYSIS_MAX_TOKENS)
    blueprint_max_tokens: int = Field(default=BLUEPRINT_MAX_TOKENS)
    design_max_tokens: int = Field(default=DESIGN_MAX_TOKENS)

    # Supabase Configuration (credit gate only)
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_service_key: str | None = Field(
        default=None, description="Supabase service role key"
    )

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # ==========================================================================
    # Scrape Limits
    # ==========================================================================

    max_subpages: int = Field(
        default=DEFAULT_MAX_SUBPAGES,
        ge=0,
        description="Number of subpages scraped besides the homepage",
    )

    # ==========================================================================
    # Timeout Configuration
    # ==========================================================================
    # All timeouts can be overridden via environment variables.
    # Defaults are sourced from facelift/constants.py.

    scraper_service_timeout_seconds: float = Field(
        default=SCRAPER_SERVICE_TIMEOUT_SECONDS,
        description="Scraping service timeout for the homepage (seconds)",
    )
    subpage_scraper_service_timeout_seconds: float = Field(
        default=SUBPAGE_SCRAPER_SERVICE_TIMEOUT_SECONDS,
        description="Scraping service timeout for subpages (seconds)",
    )
    direct_fetch_timeout_seconds: float = Field(
        default=DIRECT_FETCH_TIMEOUT_SECONDS,
        description="Direct HTTP fallback timeout for the homepage (seconds)",
    )
    subpage_direct_fetch_timeout_seconds: float = Field(
        default=SUBPAGE_DIRECT_FETCH_TIMEOUT_SECONDS,
        description="Direct HTTP fallback timeout for subpages (seconds)",
    )
    site_map_timeout_seconds: float = Field(
        default=SITE_MAP_TIMEOUT_SECONDS,
        description="Site-map discovery timeout (seconds)",
    )
    analysis_timeout_seconds: float = Field(default=ANALYSIS_TIMEOUT_SECONDS)
    blueprint_timeout_seconds: float = Field(default=BLUEPRINT_TIMEOUT_SECONDS)
    design_timeout_seconds: float = Field(default=DESIGN_TIMEOUT_SECONDS)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Infrastructure: respx_mock, test_settings, mock_logfire, logfire_capture, test_client
2. Generation: FakeGenerationClient, fake_client
3. Site fixtures: Acme Plumbing homepage / subpage HTML
4. Model payloads: brief_payload, block_blueprint_payload, niche_blueprint_payload
"""

import json
import os
import sys
from contextlib import contextmanager
from typing import Any
from unittest.mock import MagicMock, Mock, patch

import pytest
import respx

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import logfire  # noqa: E402

from facelift.config import Settings, get_settings  # noqa: E402
from facelift.services.generation_client import Completion  # noqa: E402

ACME_URL = "https://acme-plumbing.com"


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking (unmatched requests fail)."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def test_settings(monkeypatch):
    """Settings isolated from any local .env, wired into get_settings()."""
    get_settings.cache_clear()
    settings = Settings(
        _env_file=None,
        env="local",
        firecrawl_api_key="fc-test-key",
        firecrawl_base_url="https://scraper.test",
        pydantic_ai_gateway_api_key="paig_test_key",
        default_model="test",
        design_model="test",
        supabase_url=None,
        supabase_service_key=None,
        logfire_token=None,
        sentry_dsn=None,
    )
    monkeypatch.setattr("facelift.config.get_settings", lambda: settings)
    for module in (
        "facelift.services.page_fetcher",
        "facelift.services.scrape_orchestrator",
        "facelift.services.generation_client",
        "facelift.services.content_analysis",
        "facelift.services.design_consultation",
        "facelift.services.blueprint_generation",
        "facelift.services.pipeline",
        "facelift.api.generate",
        "facelift.main",
        "facelift.logging_config",
        "facelift.db.client",
        "facelift.cli.generate_cli",
    ):
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    yield settings
    get_settings.cache_clear()


@pytest.fixture
def direct_fetch_settings(test_settings):
    """Settings without a scraping-service key (direct fetch + sitemap.xml only)."""
    return test_settings.model_copy(update={"firecrawl_api_key": None})


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Patches the attributes of the real ``logfire`` module so every
    ``import logfire`` in the package sees the mocks.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.span = mock_span

    original_logfire = sys.modules["logfire"]
    for attr in [
        "info",
        "warn",
        "error",
        "exception",
        "configure",
        "instrument_fastapi",
        "instrument_pydantic",
        "instrument_pydantic_ai",
        "instrument_httpx",
    ]:
        setattr(mock_logfire_module, attr, Mock())
        monkeypatch.setattr(original_logfire, attr, getattr(mock_logfire_module, attr))
    monkeypatch.setattr(original_logfire, "span", mock_span)

    return mock_logfire_module


@pytest.fixture
def logfire_capture():
    """Capture Logfire calls as (level, args, kwargs) tuples for assertion."""
    captured_logs = []

    def capture(level):
        def _capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))

        return _capture

    with (
        patch("logfire.info", side_effect=capture("info")),
        patch("logfire.warn", side_effect=capture("warn")),
        patch("logfire.error", side_effect=capture("error")),
    ):
        yield captured_logs


@pytest.fixture
def test_client(test_settings, mock_logfire):
    """FastAPI TestClient; dependency overrides are cleared afterwards."""
    from fastapi.testclient import TestClient
    from facelift.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Generation
# =============================================================================


class FakeGenerationClient:
    """Scripted GenerationClient.

    Each call pops the next reply. A reply may be a Completion, a plain
    string (wrapped in a non-truncated Completion), a dict (JSON-encoded),
    or an exception instance to raise.
    """

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        timeout: float,
        temperature: float | None = None,
    ) -> Completion:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
                "timeout": timeout,
                "temperature": temperature,
            }
        )
        if not self.replies:
            raise AssertionError("FakeGenerationClient ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, Completion):
            return reply
        if isinstance(reply, dict):
            return Completion(text=json.dumps(reply))
        return Completion(text=reply)


@pytest.fixture
def fake_client_factory():
    """Build a FakeGenerationClient with scripted replies."""
    return FakeGenerationClient


# =============================================================================
# Site fixtures
# =============================================================================


@pytest.fixture
def acme_homepage_html():
    return """<!doctype html>
<html>
<head>
  <title>Acme Plumbing | 24/7 Emergency Plumbers</title>
  <meta property="og:image" content="https://acme-plumbing.com/img/og-van.jpg">
  <style>
    :root { --brand: #1e40af; }
    header { background-color: #1e40af; color: #ffffff; }
    .cta { background: #f97316; border-color: #f97316; }
    a { color: #1e40af; }
    body { color: #111111; background: #fafafa; }
  </style>
</head>
<body>
  <header>
    <a href="/">Home</a>
    <a href="/services">Services</a>
    <a href="/about">About</a>
    <a href="/contact#form">Contact</a>
    <a href="https://facebook.com/acmeplumbing">Facebook</a>
    <a href="/brochure.pdf">Brochure</a>
    <a href="tel:+15551234567">Call</a>
  </header>
  <main>
    <h1>Acme Plumbing</h1>
    <p>Family-owned plumbers serving Springfield since 1998. Call (555) 123-4567.</p>
    <img src="/img/hero.jpg" alt="Our team">
    <img src="https://acme-plumbing.com/img/favicon.png">
    <img src="/img/van.jpg">
    <section class="gallery">
      <img src="https://static.wixstatic.com/media/acme_job1~mv2.jpg/v1/fill/w_480,h_320,al_c,q_80/acme_job1.jpg">
      <img src="https://static.wixstatic.com/media/acme_job2~mv2.jpg/v1/fill/w_640,h_427,al_c,q_80/acme_job2.jpg">
      <img src="https://static.wixstatic.com/media/acme_job3~mv2.jpg/v1/fill/w_96,h_64,al_c/acme_job3.jpg">
    </section>
  </main>
</body>
</html>"""


@pytest.fixture
def acme_services_html():
    return """<html><head><style>.price { color: #f97316; }</style></head>
<body>
  <h1>Our Services</h1>
  <p>Drain cleaning, water heater installation, leak detection.</p>
  <img src="/img/water-heater.jpg">
  <a href="/services/drains">Drains</a>
</body></html>"""


@pytest.fixture
def acme_about_html():
    return """<html><body>
  <h1>About Acme</h1>
  <p>Licensed and insured. Over 5000 happy customers.</p>
  <img src="/img/team.jpg">
</body></html>"""


# =============================================================================
# Model payloads
# =============================================================================


@pytest.fixture
def brief_payload():
    """Minimal valid content brief in camelCase wire format."""
    return {
        "business": {
            "name": "Acme Plumbing",
            "industry": "Plumbing",
            "type": "local business",
            "url": ACME_URL,
        },
        "tone": {
            "personality": "trustworthy and friendly",
            "targetAudience": "homeowners",
            "brandKeywords": ["reliable", "fast", "local"],
        },
        "contentSections": [
            {
                "id": "services",
                "type": "services",
                "title": "Our Services",
                "summary": "Drain cleaning, water heaters and leak detection.",
                "keyPoints": ["24/7 emergency service"],
            }
        ],
        "imageCatalog": [
            {
                "url": "https://acme-plumbing.com/img/og-van.jpg",
                "index": 1,
                "description": "Company van",
                "recommendedPlacement": "hero",
                "priority": 1,
            }
        ],
        "contact": {"phone": "(555) 123-4567"},
        "nicheDetection": {"detectedNiche": None, "confidence": "low"},
        "templateRecommendation": {"template": "minimal", "reasoning": "trade service"},
    }


@pytest.fixture
def block_blueprint_payload():
    return {
        "siteName": "Acme Plumbing",
        "colorScheme": {
            "primary": "#1e40af",
            "secondary": "#f97316",
            "accent": "#f97316",
            "background": "#ffffff",
            "text": "#111111",
        },
        "font": "Inter",
        "template": "minimal",
        "layout": [
            {"type": "navbar", "brand": "Acme Plumbing", "links": []},
            {
                "type": "hero",
                "heading": "Springfield's trusted plumbers",
                "subheading": "24/7 emergency service",
                "ctaText": "Call now",
                "bgImage": "https://acme-plumbing.com/img/og-van.jpg",
                "overlay": True,
            },
            {"type": "footer", "companyName": "Acme Plumbing"},
        ],
    }


@pytest.fixture
def niche_blueprint_payload():
    return {
        "siteName": "Lakeside Wake Park",
        "colorScheme": {
            "primary": "#0c1e3a",
            "secondary": "#00bcd4",
            "accent": "#009688",
            "background": "#0c1e3a",
            "text": "#ffffff",
        },
        "template": "vibrant",
        "layout": [],
        "nicheTemplate": "water-sports",
        "nicheData": {
            "businessName": "Lakeside Wake Park",
            "tagline": "Ride the lake",
            "description": "Cable wakeboarding for all levels.",
            "custom": {"activities": [{"name": "Cable", "difficulty": "beginner"}]},
        },
    }

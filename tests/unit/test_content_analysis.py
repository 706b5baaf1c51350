"""Tests for the content-analysis stage."""

import json

import pytest

from facelift.models.pipeline_models import ErrorCode
from facelift.models.scraper_models import AggregatedScrapeResult, RankedColor
from facelift.services.content_analysis import (
    AnalysisInput,
    ContentAnalysisStage,
    build_analysis_prompt,
)
from facelift.services.errors import AnalysisError
from facelift.services.generation_client import Completion, GenerationTimeoutError

ACME_URL = "https://acme-plumbing.com"


@pytest.fixture
def aggregated():
    return AggregatedScrapeResult(
        success=True,
        url=ACME_URL,
        combined_markdown="=== HOMEPAGE: https://acme-plumbing.com ===\n" + "Acme Plumbing. " * 400,
        images=[f"{ACME_URL}/img/{i}.jpg" for i in range(12)],
        videos=[f"{ACME_URL}/v/{i}.mp4" for i in range(4)],
        colors=[RankedColor("#1e40af", 3), RankedColor("#f97316", 2)],
        scraped_urls=[ACME_URL],
    )


class TestAnalysisInput:
    """Tests for the model input and its trimmed variant."""

    def test_trimmed_is_strictly_smaller(self, aggregated):
        full = AnalysisInput.from_scrape(aggregated)
        trimmed = full.trimmed()

        assert trimmed.size < full.size
        assert trimmed.images == full.images[:8]
        assert trimmed.videos == full.videos[:2]
        assert trimmed.colors == full.colors
        assert full.markdown.startswith(trimmed.markdown)

    def test_prompt_numbers_images(self, aggregated):
        prompt = build_analysis_prompt(ACME_URL, AnalysisInput.from_scrape(aggregated))

        assert f"URL: {ACME_URL}" in prompt
        assert f"1. {ACME_URL}/img/0.jpg" in prompt
        assert "=== VIDEOS FOUND ON THE SITE ===" in prompt
        assert "1. #1e40af (3 uses)" in prompt
        assert prompt.endswith("Return ONLY the JSON object.")

    def test_prompt_omits_empty_sections(self):
        prompt = build_analysis_prompt(ACME_URL, AnalysisInput(markdown="Hello"))

        assert "IMAGES FOUND" not in prompt
        assert "VIDEOS FOUND" not in prompt
        assert "BRAND COLORS" not in prompt


class TestContentAnalysisStage:
    """Tests for ContentAnalysisStage.analyze."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, test_settings, fake_client_factory, aggregated, brief_payload):
        client = fake_client_factory(brief_payload)
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.business.name == "Acme Plumbing"
        assert len(client.calls) == 1
        assert client.calls[0]["max_tokens"] == test_settings.analysis_max_tokens

    @pytest.mark.asyncio
    async def test_fenced_reply_is_accepted(self, test_settings, fake_client_factory, aggregated, brief_payload):
        client = fake_client_factory(f"```json\n{json.dumps(brief_payload)}\n```")
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.tone.brand_keywords == ["reliable", "fast", "local"]

    @pytest.mark.asyncio
    async def test_truncated_reply_retries_with_smaller_input(
        self, test_settings, fake_client_factory, aggregated, brief_payload
    ):
        client = fake_client_factory(Completion(text='{"business": ', truncated=True), brief_payload)
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.business.name == "Acme Plumbing"
        assert len(client.calls) == 2
        assert len(client.calls[1]["user_prompt"]) < len(client.calls[0]["user_prompt"])
        assert f"{ACME_URL}/img/8.jpg" not in client.calls[1]["user_prompt"]

    @pytest.mark.asyncio
    async def test_missing_fields_retry(self, test_settings, fake_client_factory, aggregated, brief_payload):
        client = fake_client_factory({"business": {"industry": "Plumbing"}}, brief_payload)
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        await stage.analyze(aggregated, ACME_URL)

        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_both_attempts_fail(self, test_settings, fake_client_factory, aggregated):
        client = fake_client_factory(
            "not json at all",
            GenerationTimeoutError("Model test timed out after 120s"),
        )
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        with pytest.raises(AnalysisError) as exc_info:
            await stage.analyze(aggregated, ACME_URL)

        assert exc_info.value.code == ErrorCode.ANALYSIS_FAILED
        assert "timed out" in exc_info.value.message
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_missing_business_url_is_filled(
        self, test_settings, fake_client_factory, aggregated, brief_payload
    ):
        brief_payload["business"].pop("url")
        stage = ContentAnalysisStage(client=fake_client_factory(brief_payload), settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.business.url == ACME_URL

    @pytest.mark.asyncio
    async def test_partial_brief_is_forwarded(self, test_settings, fake_client_factory, aggregated):
        payload = {"business": {"name": "Acme"}, "contentSections": [{"title": "Home"}]}
        stage = ContentAnalysisStage(client=fake_client_factory(payload), settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.image_catalog == []
        assert brief.niche_detection.detected_niche is None

    @pytest.mark.asyncio
    async def test_loosely_typed_brief_is_accepted(self, test_settings, fake_client_factory, aggregated):
        payload = {
            "business": {"name": "Acme Plumbing", "industry": None},
            "contentSections": [{"title": "Home"}],
            "statistics": [{"label": "Customers", "value": 5000}],
        }
        client = fake_client_factory(payload)
        stage = ContentAnalysisStage(client=client, settings=test_settings)

        brief = await stage.analyze(aggregated, ACME_URL)

        assert brief.business.industry == ""
        assert brief.statistics[0].value == "5000"
        assert len(client.calls) == 1

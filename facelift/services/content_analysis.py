"""Content-analysis stage: aggregated scrape -> validated ContentBrief.

The first attempt sends the full aggregated input. If the reply is
truncated, unparseable or missing required fields, one retry is made with
a strictly smaller input (highest-ranked prefix of images and videos, a
shorter text window).
"""

import time
from dataclasses import dataclass, field
from typing import List

import logfire
from pydantic import ValidationError

from facelift.config import Settings, get_settings
from facelift.constants import (
    ANALYSIS_MAX_ATTEMPTS,
    TRIMMED_MAX_IMAGES,
    TRIMMED_MAX_MARKDOWN_CHARS,
    TRIMMED_MAX_VIDEOS,
)
from facelift.models.brief_models import ContentBrief
from facelift.models.scraper_models import AggregatedScrapeResult, RankedColor
from facelift.prompts import load_prompt
from facelift.services.errors import AnalysisError
from facelift.services.generation_client import (
    GenerationClient,
    PydanticAIGenerationClient,
    parse_json_document,
)


@dataclass(frozen=True)
class AnalysisInput:
    """The slice of an aggregated scrape that is sent to the model."""

    markdown: str
    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    colors: List[RankedColor] = field(default_factory=list)

    @classmethod
    def from_scrape(cls, aggregated: AggregatedScrapeResult) -> "AnalysisInput":
        return cls(
            markdown=aggregated.combined_markdown,
            images=list(aggregated.images),
            videos=list(aggregated.videos),
            colors=list(aggregated.colors),
        )

    def trimmed(self) -> "AnalysisInput":
        """Smaller variant for the retry.

        The text window is at most half the current text, so the retry
        input is always strictly smaller than a non-empty original.
        """
        window = min(TRIMMED_MAX_MARKDOWN_CHARS, len(self.markdown) // 2)
        return AnalysisInput(
            markdown=self.markdown[:window],
            images=self.images[:TRIMMED_MAX_IMAGES],
            videos=self.videos[:TRIMMED_MAX_VIDEOS],
            colors=list(self.colors),
        )

    @property
    def size(self) -> int:
        return (
            len(self.markdown)
            + sum(len(url) for url in self.images)
            + sum(len(url) for url in self.videos)
        )


def build_analysis_prompt(url: str, analysis_input: AnalysisInput) -> str:
    """User message: text, numbered image and video lists, ranked colors."""
    parts = [
        "Analyze the following scraped website content and produce a structured "
        "content brief as JSON.",
        f"URL: {url}",
        f"SCRAPED CONTENT:\n{analysis_input.markdown}",
    ]
    if analysis_input.images:
        listing = "\n".join(f"{i}. {img}" for i, img in enumerate(analysis_input.images, 1))
        parts.append(
            "=== IMAGES FOUND ON THE SITE ===\n"
            "Catalog ALL of these images in imageCatalog, using each image's "
            f"number as its index. Do not skip any.\n\n{listing}"
        )
    if analysis_input.videos:
        listing = "\n".join(f"{i}. {vid}" for i, vid in enumerate(analysis_input.videos, 1))
        parts.append(
            "=== VIDEOS FOUND ON THE SITE ===\n"
            "Include these video URLs in the content brief. The first video is "
            f"likely the hero background video.\n\n{listing}"
        )
    if analysis_input.colors:
        listing = "\n".join(
            f"{i}. {c.hex} ({c.count} uses)" for i, c in enumerate(analysis_input.colors, 1)
        )
        parts.append(
            "=== BRAND COLORS (most frequent first) ===\n"
            f"Neutral grays, near-black and near-white are already excluded.\n\n{listing}"
        )
    parts.append("Return ONLY the JSON object.")
    return "\n\n".join(parts)


def describe_validation_error(error: ValidationError) -> str:
    """Compact one-line summary of which brief fields were missing or invalid."""
    fields = sorted({".".join(str(p) for p in err["loc"]) or "<root>" for err in error.errors()})
    return f"Content brief missing or invalid fields: {', '.join(fields)}"


class ContentAnalysisStage:
    """Turn an aggregated scrape into a ContentBrief."""

    def __init__(
        self,
        client: GenerationClient | None = None,
        settings: Settings | None = None,
        max_attempts: int | None = None,
    ):
        settings = settings or get_settings()
        self._client = client or PydanticAIGenerationClient(settings.default_model)
        self._max_tokens = settings.analysis_max_tokens
        self._timeout = settings.analysis_timeout_seconds
        self._system_prompt = load_prompt("content_analysis")
        self._max_attempts = max_attempts or ANALYSIS_MAX_ATTEMPTS

    async def analyze(self, aggregated: AggregatedScrapeResult, url: str) -> ContentBrief:
        """Produce a validated brief.

        Raises:
            AnalysisError: If every attempt failed (carries the last error)
        """
        analysis_input = AnalysisInput.from_scrape(aggregated)
        last_error = "Content analysis was not attempted"

        for attempt in range(1, self._max_attempts + 1):
            start_time = time.time()
            try:
                brief = await self._attempt(url, analysis_input)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                logfire.warn(
                    "Content analysis attempt failed",
                    url=url,
                    attempt=attempt,
                    input_size=analysis_input.size,
                    error=last_error,
                    error_type=type(e).__name__,
                    response_time_ms=(time.time() - start_time) * 1000,
                )
                analysis_input = analysis_input.trimmed()
                continue

            logfire.info(
                "Content brief produced",
                url=url,
                attempt=attempt,
                business_name=brief.business.name,
                section_count=len(brief.content_sections),
                image_catalog_count=len(brief.image_catalog),
                detected_niche=brief.niche_detection.detected_niche,
                response_time_ms=(time.time() - start_time) * 1000,
            )
            return brief

        logfire.error("Content analysis failed", url=url, error=last_error)
        raise AnalysisError(f"Content analysis failed: {last_error}")

    async def _attempt(self, url: str, analysis_input: AnalysisInput) -> ContentBrief:
        completion = await self._client.complete(
            self._system_prompt,
            build_analysis_prompt(url, analysis_input),
            max_tokens=self._max_tokens,
            timeout=self._timeout,
        )
        if completion.truncated:
            raise AnalysisError(
                f"Content brief was truncated at {self._max_tokens} output tokens"
            )

        data = parse_json_document(completion.text)
        try:
            brief = ContentBrief.model_validate(data)
        except ValidationError as e:
            raise AnalysisError(describe_validation_error(e)) from e

        if not brief.business.url:
            brief.business.url = url
        return brief

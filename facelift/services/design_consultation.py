"""Optional design-consultation stage.

Asks a secondary model for free-form creative direction. Purely additive:
every failure is logged and reported as ``None``.
"""

import time

import logfire

from facelift.config import Settings, get_settings
from facelift.models.brief_models import ContentBrief
from facelift.prompts import load_prompt
from facelift.services.generation_client import (
    GenerationClient,
    PydanticAIGenerationClient,
)

DESIGN_TEMPERATURE = 0.7


class DesignConsultationStage:
    """Best-effort design guide for blueprint generation."""

    def __init__(
        self,
        client: GenerationClient | None = None,
        settings: Settings | None = None,
        enabled: bool | None = None,
    ):
        settings = settings or get_settings()
        self.enabled = settings.design_consultation_enabled if enabled is None else enabled
        self._client = client or PydanticAIGenerationClient(settings.design_model)
        self._max_tokens = settings.design_max_tokens
        self._timeout = settings.design_timeout_seconds

    async def consult(self, brief: ContentBrief, url: str) -> str | None:
        """Return a design guide, or ``None`` when disabled or on any failure."""
        if not self.enabled:
            logfire.info("Design consultation disabled, skipping", url=url)
            return None

        prompt = (
            "Create a premium design layout guide for this website redesign.\n\n"
            f"ORIGINAL URL: {url}\n\n"
            f"CONTENT BRIEF:\n{brief.to_prompt_json()}\n\n"
            "Produce the full design guide now. Be extremely specific and reference "
            "the actual content from the brief."
        )
        start_time = time.time()
        try:
            completion = await self._client.complete(
                load_prompt("design_consultant"),
                prompt,
                max_tokens=self._max_tokens,
                timeout=self._timeout,
                temperature=DESIGN_TEMPERATURE,
            )
        except Exception as e:
            logfire.warn(
                "Design consultation failed, continuing without guidance",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
                response_time_ms=(time.time() - start_time) * 1000,
            )
            return None

        guide = completion.text.strip()
        if not guide:
            logfire.warn("Design consultation returned empty guidance", url=url)
            return None

        logfire.info(
            "Design guidance received",
            url=url,
            guide_length=len(guide),
            truncated=completion.truncated,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return guide

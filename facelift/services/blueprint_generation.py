"""Blueprint-generation stage: ContentBrief (+ optional guidance) -> Blueprint.

A single model call. Output is decoded as an untyped document, routed to
the niche or block path, and validated. Truncated output and shape errors
fail the stage; nothing is repaired beyond normalizing an absent layout.
"""

import time
from typing import Any, Dict, List

import logfire
from pydantic import ValidationError

from facelift.config import Settings, get_settings
from facelift.models.blueprint_models import Blueprint, blueprint_adapter
from facelift.models.brief_models import ContentBrief
from facelift.prompts import load_prompt
from facelift.services.errors import GenerationError
from facelift.services.generation_client import (
    GenerationClient,
    PydanticAIGenerationClient,
    parse_json_document,
)


def build_blueprint_prompt(brief: ContentBrief, guidance: str | None) -> str:
    prompt = (
        "Generate a complete, modern website blueprint from this content brief. "
        "Return ONLY the blueprint JSON object.\n\n"
        f"CONTENT BRIEF:\n{brief.to_prompt_json()}"
    )
    if guidance:
        prompt += (
            "\n\n=== DESIGN GUIDE FROM SENIOR DESIGNER ===\n"
            "Follow these design directions closely: section ordering, visual "
            "treatments, spacing and interaction patterns. Treat this guide as "
            "authoritative creative direction.\n\n"
            f"{guidance}\n\n"
            "=== END DESIGN GUIDE ==="
        )
    return prompt


def route_blueprint(data: Dict[str, Any]) -> Dict[str, Any]:
    """Tag a raw blueprint document with its path.

    The niche path (template + data) wins when both are present; its
    layout is dropped so exactly one path is populated. An absent layout
    is normalized to an empty list.

    Raises:
        GenerationError: If neither path is populated or the color scheme
            is missing
    """
    document = dict(data)
    layout = document.get("layout")
    if layout is None:
        layout = []
    if not isinstance(layout, list):
        raise GenerationError("Invalid blueprint: layout must be a list")

    niche_template = document.get("nicheTemplate")
    niche_data = document.get("nicheData")
    if niche_template and isinstance(niche_data, dict) and niche_data:
        document["kind"] = "niche"
        document.pop("layout", None)
    elif layout:
        document["kind"] = "blocks"
        document["layout"] = layout
        document.pop("nicheTemplate", None)
        document.pop("nicheData", None)
    else:
        raise GenerationError(
            "Invalid blueprint: must have either nicheTemplate+nicheData "
            "or a non-empty layout array"
        )

    if not isinstance(document.get("colorScheme"), dict):
        raise GenerationError("Invalid blueprint: missing colorScheme")
    return document


class BlueprintGenerationStage:
    """Turn a ContentBrief into a validated Blueprint."""

    def __init__(
        self,
        client: GenerationClient | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self._client = client or PydanticAIGenerationClient(settings.default_model)
        self._max_tokens = settings.blueprint_max_tokens
        self._timeout = settings.blueprint_timeout_seconds
        self._system_prompt = load_prompt("blueprint")

    async def generate(
        self,
        brief: ContentBrief,
        guidance: str | None,
        discovered_urls: List[str],
    ) -> Blueprint:
        """Generate and validate a blueprint, attaching ``discovered_urls``.

        Raises:
            GenerationError: On model failure, truncation, unparseable output
                or an invalid blueprint shape
        """
        start_time = time.time()
        try:
            completion = await self._client.complete(
                self._system_prompt,
                build_blueprint_prompt(brief, guidance),
                max_tokens=self._max_tokens,
                timeout=self._timeout,
            )
        except Exception as e:
            raise GenerationError(f"Blueprint generation failed: {e}") from e

        if completion.truncated:
            raise GenerationError(
                f"Blueprint was truncated at {self._max_tokens} output tokens"
            )

        try:
            data = parse_json_document(completion.text)
        except ValueError as e:
            raise GenerationError(f"Blueprint generation failed: {e}") from e

        document = route_blueprint(data)
        document["discoveredUrls"] = list(discovered_urls)
        try:
            blueprint = blueprint_adapter.validate_python(document)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise GenerationError(
                f"Invalid blueprint: missing or invalid fields: {', '.join(fields)}"
            ) from e

        logfire.info(
            "Blueprint generated",
            site_name=blueprint.site_name,
            kind=blueprint.kind,
            block_count=len(blueprint.layout),
            guidance_used=bool(guidance),
            discovered_url_count=len(discovered_urls),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return blueprint

"""AI content-generation client using PydanticAI Gateway.

Stages talk to the model through the small ``GenerationClient`` protocol so
tests can substitute a scripted fake.
"""

import asyncio
import json
import re
import time
from dataclasses import dataclass
from typing import Any, Protocol

import logfire
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from facelift.config import get_settings

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class GenerationTimeoutError(Exception):
    """Raised when a completion does not finish within its timeout."""


@dataclass
class Completion:
    """Text returned by the model and whether it hit the output-token ceiling."""

    text: str
    truncated: bool = False


class GenerationClient(Protocol):
    """Protocol for a text-completion model."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        timeout: float,
        temperature: float | None = None,
    ) -> Completion:
        """Run one completion.

        Raises:
            GenerationTimeoutError: If the call exceeds ``timeout``
        """
        ...


class PydanticAIGenerationClient:
    """GenerationClient backed by a plain-text PydanticAI agent."""

    def __init__(self, model: str | None = None):
        """
        Args:
            model: Model string (e.g., 'gateway/anthropic:claude-sonnet-4-5').
                   Defaults to settings.default_model
        """
        self.model = model or get_settings().default_model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        timeout: float,
        temperature: float | None = None,
    ) -> Completion:
        agent = Agent(
            self.model,
            output_type=str,
            system_prompt=system_prompt,
            defer_model_check=True,
        )
        model_settings: ModelSettings = {"max_tokens": max_tokens, "timeout": timeout}
        if temperature is not None:
            model_settings["temperature"] = temperature

        start_time = time.time()
        try:
            result = await asyncio.wait_for(
                agent.run(user_prompt, model_settings=model_settings), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(
                f"Model {self.model} timed out after {timeout:.0f}s"
            ) from e

        response = getattr(result, "response", None)
        truncated = getattr(response, "finish_reason", None) == "length"
        logfire.info(
            "Completion received",
            model=self.model,
            output_length=len(result.output),
            truncated=truncated,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return Completion(text=result.output, truncated=truncated)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (``` or ```json) if present."""
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text.strip()


def parse_json_document(text: str) -> dict[str, Any]:
    """Parse a model reply that should contain a single JSON object.

    Raises:
        ValueError: If the text is not a JSON object
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Tolerate prose around the object by taking the outermost braces
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("Response did not contain a JSON object")
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Response was not valid JSON: {e.msg}") from e
    if not isinstance(data, dict):
        raise ValueError("Response JSON was not an object")
    return data

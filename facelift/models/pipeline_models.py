"""Request and result models for the scrape-and-generate pipeline."""

from enum import Enum

from pydantic import BaseModel, Field

from facelift.models.blueprint_models import Blueprint
from facelift.models.brief_models import ContentBrief


class ErrorCode(str, Enum):
    """User-facing failure codes returned by the pipeline."""

    NO_CREDITS = "NO_CREDITS"
    INVALID_URL = "INVALID_URL"
    SCRAPE_FAILED = "SCRAPE_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    GENERATION_FAILED = "GENERATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GenerateRequest(BaseModel):
    """Body of a generate or scrape request."""

    url: str = Field(..., min_length=1, max_length=2048, description="Website URL")


class PipelineResult(BaseModel):
    """Single tagged result of a pipeline run.

    On success ``blueprint`` and ``brief`` are set; on failure ``error_code``
    and ``error`` describe which stage stopped the run.
    """

    success: bool
    blueprint: Blueprint | None = None
    brief: ContentBrief | None = None
    discovered_urls: list[str] = Field(default_factory=list)
    design_guidance_used: bool = False
    error_code: ErrorCode | None = None
    error: str | None = None

    @classmethod
    def failed(cls, code: ErrorCode, message: str) -> "PipelineResult":
        return cls(success=False, error_code=code, error=message)

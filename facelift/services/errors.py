"""Pipeline exception hierarchy.

Each fatal error carries a short machine-usable ``code`` plus a
human-readable message. Services raise these; only the pipeline
coordinator turns them into a ``PipelineResult``.
"""

from facelift.models.pipeline_models import ErrorCode


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class PreconditionError(PipelineError):
    """Raised when a run is refused before any work (no credits, invalid URL)."""

    code = ErrorCode.INVALID_URL


class ScrapeError(PipelineError):
    """Raised when the homepage cannot be fetched by any strategy."""

    code = ErrorCode.SCRAPE_FAILED


class AnalysisError(PipelineError):
    """Raised when every content-analysis attempt failed."""

    code = ErrorCode.ANALYSIS_FAILED


class GenerationError(PipelineError):
    """Raised when the blueprint is truncated or has an invalid shape."""

    code = ErrorCode.GENERATION_FAILED

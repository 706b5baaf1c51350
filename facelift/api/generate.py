"""Generation endpoints.

The handlers only translate HTTP to pipeline calls and pipeline results to
status codes; all business logic lives in the services. Dependencies are
injectable via ``app.dependency_overrides`` for testing.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from facelift.config import get_settings
from facelift.models.pipeline_models import ErrorCode, GenerateRequest, PipelineResult
from facelift.services.credit_gate import (
    CreditGate,
    SupabaseCreditGate,
    UnlimitedCreditGate,
)
from facelift.services.pipeline import PipelineCoordinator
from facelift.services.scrape_orchestrator import ScrapeOrchestrator
from facelift.services.url_validation import validate_url

router = APIRouter()

ERROR_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.NO_CREDITS: 402,
    ErrorCode.INVALID_URL: 422,
    ErrorCode.SCRAPE_FAILED: 502,
    ErrorCode.ANALYSIS_FAILED: 502,
    ErrorCode.GENERATION_FAILED: 502,
    ErrorCode.INTERNAL_ERROR: 500,
}


def status_for(result: PipelineResult) -> int:
    if result.success or result.error_code is None:
        return 200
    return ERROR_STATUS_CODES.get(result.error_code, 500)


def get_credit_gate(x_user_id: str | None = Header(default=None)) -> CreditGate:
    """Per-user Supabase gate when a user is identified and Supabase is configured."""
    settings = get_settings()
    if x_user_id and settings.supabase_url and settings.supabase_service_key:
        return SupabaseCreditGate(x_user_id)
    return UnlimitedCreditGate()


def get_pipeline_coordinator(
    credit_gate: CreditGate = Depends(get_credit_gate),
) -> PipelineCoordinator:
    return PipelineCoordinator(credit_gate=credit_gate)


def get_scrape_orchestrator() -> ScrapeOrchestrator:
    return ScrapeOrchestrator()


@router.post("/generate")
async def generate(
    request: GenerateRequest,
    coordinator: PipelineCoordinator = Depends(get_pipeline_coordinator),
):
    """Run the full scrape-and-generate pipeline for a URL."""
    result = await coordinator.run(request.url)
    return JSONResponse(
        status_code=status_for(result),
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post("/scrape")
async def scrape(
    request: GenerateRequest,
    orchestrator: ScrapeOrchestrator = Depends(get_scrape_orchestrator),
):
    """Run only the multi-page scrape (debugging aid)."""
    validation = validate_url(request.url)
    if not validation.is_valid:
        failure = PipelineResult.failed(ErrorCode.INVALID_URL, validation.reason or "")
        return JSONResponse(
            status_code=status_for(failure),
            content=failure.model_dump(mode="json", exclude_none=True),
        )

    aggregated = await orchestrator.scrape(validation.normalized_url or request.url)
    return JSONResponse(
        status_code=200 if aggregated.success else 502,
        content=asdict(aggregated),
    )

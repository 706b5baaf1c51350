"""Pipeline coordinator: credit gate -> URL check -> scrape -> analyze -> consult -> generate.

The only place where stage exceptions become a ``PipelineResult``. Every
stage failure short-circuits; design consultation is the only stage whose
failure is ignored.
"""

import time

import logfire

from facelift.config import Settings, get_settings
from facelift.models.pipeline_models import ErrorCode, PipelineResult
from facelift.services.blueprint_generation import BlueprintGenerationStage
from facelift.services.content_analysis import ContentAnalysisStage
from facelift.services.credit_gate import CreditGate, UnlimitedCreditGate
from facelift.services.design_consultation import DesignConsultationStage
from facelift.services.errors import PipelineError, PreconditionError, ScrapeError
from facelift.services.scrape_orchestrator import ScrapeOrchestrator
from facelift.services.url_validation import validate_url

NO_CREDITS_MESSAGE = "No credits remaining. Purchase more credits to continue."


class PipelineCoordinator:
    """Run one scrape-and-generate pipeline per request.

    Components can be injected for testing; defaults are built from settings.
    """

    def __init__(
        self,
        credit_gate: CreditGate | None = None,
        orchestrator: ScrapeOrchestrator | None = None,
        analysis: ContentAnalysisStage | None = None,
        design: DesignConsultationStage | None = None,
        blueprint: BlueprintGenerationStage | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.credit_gate = credit_gate or UnlimitedCreditGate()
        self.orchestrator = orchestrator or ScrapeOrchestrator(settings=settings)
        self.analysis = analysis or ContentAnalysisStage(settings=settings)
        self.design = design or DesignConsultationStage(settings=settings)
        self.blueprint = blueprint or BlueprintGenerationStage(settings=settings)

    async def run(self, url: str) -> PipelineResult:
        """Execute the pipeline. Never raises; failures are tagged results."""
        start_time = time.time()
        try:
            with logfire.span("facelift pipeline", url=url):
                result = await self._run(url)
        except PipelineError as e:
            logfire.warn(
                "Pipeline stopped",
                url=url,
                error_code=e.code.value,
                error=e.message,
                total_time_ms=(time.time() - start_time) * 1000,
            )
            return PipelineResult.failed(e.code, e.message)
        except Exception as e:
            logfire.exception(
                "Pipeline failed unexpectedly",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return PipelineResult.failed(
                ErrorCode.INTERNAL_ERROR, f"Unexpected error: {type(e).__name__}: {e}"
            )

        logfire.info(
            "Pipeline completed",
            url=url,
            kind=result.blueprint.kind if result.blueprint else None,
            design_guidance_used=result.design_guidance_used,
            discovered_url_count=len(result.discovered_urls),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return result

    async def _run(self, url: str) -> PipelineResult:
        with logfire.span("check credits"):
            if not await self.credit_gate.has_credits():
                raise PreconditionError(NO_CREDITS_MESSAGE, ErrorCode.NO_CREDITS)

        validation = validate_url(url)
        if not validation.is_valid:
            raise PreconditionError(validation.reason or "URL is not allowed")
        target = validation.normalized_url or url

        with logfire.span("scrape site", url=target):
            aggregated = await self.orchestrator.scrape(target)
        if not aggregated.success:
            raise ScrapeError(aggregated.error or "Failed to scrape the website.")

        with logfire.span("analyze content"):
            brief = await self.analysis.analyze(aggregated, target)

        with logfire.span("design consultation"):
            try:
                guidance = await self.design.consult(brief, target)
            except Exception as e:
                logfire.warn(
                    "Design consultation raised, continuing without guidance",
                    url=target,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                guidance = None

        with logfire.span("generate blueprint"):
            blueprint = await self.blueprint.generate(
                brief, guidance, aggregated.discovered_urls
            )

        return PipelineResult(
            success=True,
            blueprint=blueprint,
            brief=brief,
            discovered_urls=list(aggregated.discovered_urls),
            design_guidance_used=guidance is not None,
        )

"""Tests for the HTTP endpoints."""

from facelift import __version__
from facelift.api.generate import (
    get_credit_gate,
    get_pipeline_coordinator,
    get_scrape_orchestrator,
    status_for,
)
from facelift.main import app
from facelift.models.pipeline_models import ErrorCode, PipelineResult
from facelift.models.scraper_models import AggregatedScrapeResult, RankedColor
from facelift.services.credit_gate import SupabaseCreditGate, UnlimitedCreditGate

ACME_URL = "https://acme-plumbing.com"


class StubCoordinator:
    def __init__(self, result: PipelineResult):
        self.result = result
        self.urls: list[str] = []

    async def run(self, url):
        self.urls.append(url)
        return self.result


class StubOrchestrator:
    def __init__(self, result: AggregatedScrapeResult):
        self.result = result
        self.urls: list[str] = []

    async def scrape(self, url):
        self.urls.append(url)
        return self.result


class TestApplication:
    """Tests for application wiring."""

    def test_app_initialization(self):
        assert app.title == "Web Facelift"
        assert app.version == __version__

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Web Facelift API",
            "model": "test",
            "version": __version__,
        }

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_lifespan_configures_logging(self, test_settings, mock_logfire):
        from fastapi.testclient import TestClient

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

        mock_logfire.configure.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once()


class TestGenerateEndpoint:
    """Tests for POST /generate."""

    def test_success(self, test_client, brief_payload, block_blueprint_payload):
        result = PipelineResult.model_validate(
            {
                "success": True,
                "blueprint": {**block_blueprint_payload, "kind": "blocks"},
                "brief": brief_payload,
                "discovered_urls": [f"{ACME_URL}/faq"],
                "design_guidance_used": True,
            }
        )
        coordinator = StubCoordinator(result)
        app.dependency_overrides[get_pipeline_coordinator] = lambda: coordinator

        response = test_client.post("/generate", json={"url": ACME_URL})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["blueprint"]["siteName"] == "Acme Plumbing"
        assert data["blueprint"]["colorScheme"]["primary"] == "#1e40af"
        assert data["brief"]["contentSections"][0]["title"] == "Our Services"
        assert "error" not in data
        assert coordinator.urls == [ACME_URL]

    def test_failure_status_codes(self, test_client):
        coordinator = StubCoordinator(
            PipelineResult.failed(ErrorCode.INVALID_URL, "Etsy pages cannot be reconstructed.")
        )
        app.dependency_overrides[get_pipeline_coordinator] = lambda: coordinator

        response = test_client.post("/generate", json={"url": "https://etsy.com/shop/x"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_URL"

    def test_missing_url_is_rejected(self, test_client):
        response = test_client.post("/generate", json={})

        assert response.status_code == 422

    def test_status_for(self):
        assert status_for(PipelineResult(success=True)) == 200
        assert status_for(PipelineResult.failed(ErrorCode.NO_CREDITS, "x")) == 402
        assert status_for(PipelineResult.failed(ErrorCode.SCRAPE_FAILED, "x")) == 502
        assert status_for(PipelineResult.failed(ErrorCode.ANALYSIS_FAILED, "x")) == 502
        assert status_for(PipelineResult.failed(ErrorCode.GENERATION_FAILED, "x")) == 502
        assert status_for(PipelineResult.failed(ErrorCode.INTERNAL_ERROR, "x")) == 500


class TestScrapeEndpoint:
    """Tests for POST /scrape."""

    def test_success(self, test_client):
        orchestrator = StubOrchestrator(
            AggregatedScrapeResult(
                success=True,
                url=ACME_URL,
                combined_markdown="=== HOMEPAGE ===",
                colors=[RankedColor("#1e40af", 3)],
                scraped_urls=[ACME_URL],
            )
        )
        app.dependency_overrides[get_scrape_orchestrator] = lambda: orchestrator

        response = test_client.post("/scrape", json={"url": "acme-plumbing.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["colors"] == [{"hex": "#1e40af", "count": 3}]
        assert orchestrator.urls == [ACME_URL]

    def test_blocked_url(self, test_client):
        orchestrator = StubOrchestrator(AggregatedScrapeResult(success=True, url=""))
        app.dependency_overrides[get_scrape_orchestrator] = lambda: orchestrator

        response = test_client.post("/scrape", json={"url": "https://github.com/acme"})

        assert response.status_code == 422
        assert orchestrator.urls == []

    def test_scrape_failure(self, test_client):
        orchestrator = StubOrchestrator(
            AggregatedScrapeResult(success=False, url=ACME_URL, error="HTTP 503")
        )
        app.dependency_overrides[get_scrape_orchestrator] = lambda: orchestrator

        response = test_client.post("/scrape", json={"url": ACME_URL})

        assert response.status_code == 502
        assert response.json()["error"] == "HTTP 503"


class TestCreditGateDependency:
    """Tests for get_credit_gate."""

    def test_anonymous_is_unlimited(self, test_settings):
        assert isinstance(get_credit_gate(None), UnlimitedCreditGate)

    def test_user_without_supabase_is_unlimited(self, test_settings):
        assert isinstance(get_credit_gate("user-1"), UnlimitedCreditGate)

    def test_user_with_supabase(self, test_settings, monkeypatch):
        settings = test_settings.model_copy(
            update={"supabase_url": "https://test.supabase.co", "supabase_service_key": "key"}
        )
        monkeypatch.setattr("facelift.api.generate.get_settings", lambda: settings)

        gate = get_credit_gate("user-1")

        assert isinstance(gate, SupabaseCreditGate)
        assert gate.user_id == "user-1"

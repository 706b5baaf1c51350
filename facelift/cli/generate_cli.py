"""Typer-based command-line interface."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from dotenv import load_dotenv

# Later files override earlier ones, matching Settings
load_dotenv(".env")
load_dotenv(".env.local", override=True)

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from facelift.config import get_settings
from facelift.logging_config import setup_cli_logging
from facelift.services.credit_gate import UnlimitedCreditGate
from facelift.services.design_consultation import DesignConsultationStage
from facelift.services.pipeline import PipelineCoordinator
from facelift.services.scrape_orchestrator import ScrapeConfig, ScrapeOrchestrator
from facelift.services.url_validation import validate_url

app = typer.Typer(help="Scrape a website and generate a modern site blueprint.")


def _emit(payload: dict, output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2)
    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(text)


@app.callback()
def _main() -> None:
    """Configure logging before any command runs."""
    setup_cli_logging()


@app.command()
def generate(
    url: str = typer.Argument(..., help="Website URL to redesign"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the result JSON to this file"
    ),
    max_subpages: Optional[int] = typer.Option(
        None, "--max-subpages", min=0, help="Subpages to scrape besides the homepage"
    ),
    no_design: bool = typer.Option(
        False, "--no-design", help="Skip the design-consultation stage"
    ),
):
    """Run the full pipeline and print the result JSON."""
    settings = get_settings()
    config = ScrapeConfig.from_settings(settings)
    if max_subpages is not None:
        config = ScrapeConfig(**{**asdict(config), "max_subpages": max_subpages})

    coordinator = PipelineCoordinator(
        credit_gate=UnlimitedCreditGate(),
        orchestrator=ScrapeOrchestrator(config=config, settings=settings),
        design=DesignConsultationStage(settings=settings, enabled=not no_design),
        settings=settings,
    )
    result = asyncio.run(coordinator.run(url))
    _emit(result.model_dump(mode="json", by_alias=True, exclude_none=True), output)

    if not result.success:
        typer.secho(
            f"{result.error_code.value if result.error_code else 'ERROR'}: {result.error}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)


@app.command()
def scrape(
    url: str = typer.Argument(..., help="Website URL to scrape"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the scrape JSON to this file"
    ),
):
    """Run only the multi-page scrape and print the aggregated result."""
    validation = validate_url(url)
    if not validation.is_valid:
        typer.secho(f"INVALID_URL: {validation.reason}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    orchestrator = ScrapeOrchestrator()
    aggregated = asyncio.run(orchestrator.scrape(validation.normalized_url or url))
    _emit(asdict(aggregated), output)

    if not aggregated.success:
        typer.secho(f"SCRAPE_FAILED: {aggregated.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

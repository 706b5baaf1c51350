"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from facelift import __version__
from facelift.api import generate, health
from facelift.config import get_settings
from facelift.logging_config import setup_logfire


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            integrations=[FastApiIntegration()],
        )

    logfire.info(
        "Application startup complete",
        model=settings.default_model,
        design_model=settings.design_model,
        design_consultation_enabled=settings.design_consultation_enabled,
        max_subpages=settings.max_subpages,
        environment=settings.env,
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Web Facelift",
    description="Scrape a website and generate a modern site blueprint",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(generate.router, tags=["generate"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Web Facelift API",
        "model": settings.default_model,
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "facelift.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )

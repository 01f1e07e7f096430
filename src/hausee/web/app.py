"""FastAPI application for the Hausee agent-matching intake.

Hosts the intake wizard API and a health check.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from hausee import __version__
from hausee.core.config import Settings
from hausee.intake.catalog import load_catalog
from hausee.intake.drafts import DraftStore, FileDraftStore
from hausee.intake.store import IntakeStore
from hausee.intake.validation import StepValidator
from hausee.verification.client import FunctionsVerificationClient, VerificationClient
from hausee.web.intake_router import router as intake_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = __version__


# --- Application factory ---


def create_app(
    settings: Settings | None = None,
    verification_client: VerificationClient | None = None,
    draft_store: DraftStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with fake verification services and in-memory drafts.

    Args:
        settings: Application settings. Defaults to Settings().
        verification_client: Optional pre-built verification client.
        draft_store: Optional draft store. Defaults to files under
            ``settings.intake.drafts_dir``.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("hausee").setLevel(settings.log_level.upper())

    if verification_client is None:
        verification_client = FunctionsVerificationClient(config=settings.verification)
    if draft_store is None:
        draft_store = FileDraftStore(settings.intake.drafts_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        close = getattr(verification_client, "close", None)
        if close is not None:
            await close()

    app = FastAPI(
        title="Hausee Agent Matching",
        description="Buyer and seller intake for matching with a real-estate agent",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    catalog = load_catalog(settings.intake.catalog_path)

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.step_validator = StepValidator(catalog=catalog)
    app.state.draft_store = draft_store
    app.state.intake_store = IntakeStore()
    app.state.verification_client = verification_client

    app.include_router(intake_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", service="hausee-intake")

    logger.info("Hausee intake app created (environment=%s)", settings.environment)
    return app

"""FastAPI application entry point for the deferred-scheme facilitator.

Lifecycle:
    1. Startup: Initialize logging and build the verifier. A network that
       cannot be resolved aborts startup; the facilitator is useless
       without a chain.
    2. Running: Serve the facilitator API at /api/v1/deferred/*.
    3. Shutdown: Close the ledger RPC session.

Run with:
    uv run uvicorn x402_deferred.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from x402_deferred.config import get_settings
from x402_deferred.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info(
        "app.starting",
        env=settings.app_env,
        network=settings.deferred_network,
        escrow=settings.deferred_escrow_address,
    )

    from x402_deferred.services.verification_service import get_verifier

    verifier = get_verifier()
    logger.info(
        "app.started",
        chain_id=verifier.chain_id,
        host=settings.app_host,
        port=settings.app_port,
    )

    yield

    # Shutdown
    logger.info("app.shutting_down")
    await verifier.aclose()
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory — creates and configures the FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="x402 Deferred Facilitator",
        description="Verifies EIP-712 signed vouchers for the x402 deferred payment scheme.",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    from x402_deferred.api.middleware import setup_middleware

    setup_middleware(app)

    from x402_deferred.api.routes.deferred import router as deferred_router
    from x402_deferred.api.routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(deferred_router)

    return app


# The app instance used by Uvicorn
app = create_app()

"""Health check endpoint.

Reports whether the verifier could be built and whether its ledger RPC
endpoint answers. Used by container healthchecks and load balancers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from x402_deferred.api.deps import get_verifier_or_error
from x402_deferred.domain.exceptions import ConfigurationError
from x402_deferred.logging_config import get_logger
from x402_deferred.schemas.x402 import HealthResponse
from x402_deferred.verifiers.deferred import DeferredSchemeVerifier

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the facilitator and its ledger RPC.",
)
async def health_check(
    verifier: DeferredSchemeVerifier | ConfigurationError = Depends(get_verifier_or_error),
) -> HealthResponse:
    """Check that the verifier is configured and the RPC endpoint is reachable."""
    if isinstance(verifier, ConfigurationError):
        logger.error("health.verifier_unavailable", error=verifier.message)
        return HealthResponse(status="unavailable", ledger=f"unconfigured: {verifier.message}")

    ledger_status = "unknown"
    is_connected = getattr(verifier.ledger, "is_connected", None)
    if is_connected is not None:
        ledger_status = "healthy" if await is_connected() else "unreachable"
        if ledger_status != "healthy":
            logger.error("health.ledger_unreachable", network=verifier.network)

    return HealthResponse(
        status="ok" if ledger_status == "healthy" else "degraded",
        network=verifier.network,
        ledger=ledger_status,
    )

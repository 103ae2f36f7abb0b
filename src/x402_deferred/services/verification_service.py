"""Verification Service — the facilitator's entry point for /verify.

Sits between the HTTP layer and DeferredSchemeVerifier:
    - rejects envelopes for another scheme or network before the pipeline,
    - converts API schemas into domain objects,
    - logs the verdict.

The verifier is built once from settings and shared by every request.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from x402_deferred.config import get_settings
from x402_deferred.domain.enums import PaymentScheme, VerificationOutcome
from x402_deferred.domain.results import VerificationResult
from x402_deferred.infrastructure.chains import get_chain_id_from_network
from x402_deferred.logging_config import get_logger
from x402_deferred.verifiers.deferred import DeferredSchemeVerifier

if TYPE_CHECKING:
    from x402_deferred.schemas.x402 import VerifyRequest

logger = get_logger(__name__)


class VerificationService:
    """Runs deferred-scheme verification for facilitator requests."""

    def __init__(self, verifier: DeferredSchemeVerifier) -> None:
        self._verifier = verifier

    @property
    def verifier(self) -> DeferredSchemeVerifier:
        return self._verifier

    def _check_envelope(self, request: VerifyRequest) -> str | None:
        """Return why the envelope is not ours to verify, or None."""
        payment = request.payment_payload
        requirements = request.payment_requirements

        for scheme in (payment.scheme, requirements.scheme):
            if scheme != PaymentScheme.DEFERRED:
                return f"Unsupported scheme: {scheme}"

        for network in (payment.network, requirements.network):
            if get_chain_id_from_network(network) != self._verifier.chain_id:
                return (
                    f"Network mismatch: {network} "
                    f"(facilitator verifies {self._verifier.network})"
                )
        return None

    async def verify(self, request: VerifyRequest) -> VerificationResult:
        """Verify one x402 deferred payment.

        Returns:
            The VerificationResult from the pipeline, or an
            UNSUPPORTED_PAYMENT result if the envelope is not for this
            facilitator.
        """
        rejection = self._check_envelope(request)
        if rejection:
            logger.info("verification.unsupported_payment", reason=rejection)
            return VerificationResult.invalid(VerificationOutcome.UNSUPPORTED_PAYMENT, rejection)

        result = await self._verifier.verify(
            request.payment_payload.payload.to_domain(),
            request.payment_requirements.to_domain(),
        )

        if result.is_valid:
            logger.info("verification.passed", payer=result.payer)
        else:
            logger.info(
                "verification.failed",
                outcome=result.outcome.value,
                reason=(result.invalid_reason or "")[:200],
            )
        return result


@lru_cache(maxsize=1)
def get_verifier() -> DeferredSchemeVerifier:
    """Build the process-wide verifier from settings.

    Raises:
        UnsupportedNetworkError: If the configured network is not supported.
    """
    settings = get_settings()
    return DeferredSchemeVerifier(
        settings.deferred_config,
        request_timeout=settings.ledger_request_timeout_seconds,
        read_attempts=settings.ledger_read_attempts,
    )

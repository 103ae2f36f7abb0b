"""FastAPI dependency injection providers.

Used with Depends() in route handlers. Tests replace get_verification_service
through app.dependency_overrides to run against an in-memory ledger.
"""

from __future__ import annotations

from fastapi import Depends

from x402_deferred.domain.exceptions import ConfigurationError
from x402_deferred.services.verification_service import VerificationService, get_verifier
from x402_deferred.verifiers.deferred import DeferredSchemeVerifier


def get_deferred_verifier() -> DeferredSchemeVerifier:
    """Provide the process-wide DeferredSchemeVerifier."""
    return get_verifier()


def get_verifier_or_error() -> DeferredSchemeVerifier | ConfigurationError:
    """Provide the verifier, or the error that kept it from being built.

    Used by the health route, which reports misconfiguration in its body.
    """
    try:
        return get_verifier()
    except ConfigurationError as exc:
        return exc


def get_verification_service(
    verifier: DeferredSchemeVerifier = Depends(get_deferred_verifier),
) -> VerificationService:
    """Provide a VerificationService bound to the shared verifier."""
    return VerificationService(verifier)

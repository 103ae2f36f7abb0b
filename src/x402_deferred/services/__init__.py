"""Application services — use case orchestration."""

from x402_deferred.services.verification_service import VerificationService, get_verifier

__all__ = ["VerificationService", "get_verifier"]

"""Verification result returned by the deferred-scheme pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from x402_deferred.domain.enums import VerificationOutcome
from x402_deferred.domain.exceptions import (
    FieldValidationError,
    InsufficientFundsError,
    ReplayError,
    SignatureError,
    VerificationFaultError,
    VoucherRejectedError,
)

_REJECTIONS: dict[VerificationOutcome, type[VoucherRejectedError]] = {
    VerificationOutcome.FIELDS_INVALID: FieldValidationError,
    VerificationOutcome.INVALID_SIGNATURE: SignatureError,
    VerificationOutcome.SIGNER_MISMATCH: SignatureError,
    VerificationOutcome.ALREADY_CLAIMED: ReplayError,
    VerificationOutcome.INSUFFICIENT_BALANCE: InsufficientFundsError,
    VerificationOutcome.VERIFICATION_FAULT: VerificationFaultError,
    VerificationOutcome.UNSUPPORTED_PAYMENT: FieldValidationError,
}


@dataclass(frozen=True)
class VerificationResult:
    """Output of one verify() call. Produced fresh, never persisted.

    Attributes:
        is_valid: Whether the voucher may be settled.
        invalid_reason: Human-readable cause, None when valid.
        payer: The buyer address, set only when valid.
        outcome: Which pipeline stage decided the result.
        recovered_signer: Address recovered from the signature, if any.
    """

    is_valid: bool
    invalid_reason: str | None
    payer: str | None
    outcome: VerificationOutcome
    recovered_signer: str | None = None

    @classmethod
    def valid(cls, payer: str, recovered_signer: str | None = None) -> VerificationResult:
        return cls(
            is_valid=True,
            invalid_reason=None,
            payer=payer,
            outcome=VerificationOutcome.VALID,
            recovered_signer=recovered_signer,
        )

    @classmethod
    def invalid(
        cls,
        outcome: VerificationOutcome,
        reason: str,
        recovered_signer: str | None = None,
    ) -> VerificationResult:
        return cls(
            is_valid=False,
            invalid_reason=reason,
            payer=None,
            outcome=outcome,
            recovered_signer=recovered_signer,
        )

    def raise_for_invalid(self) -> None:
        """Raise the matching VoucherRejectedError if the voucher is invalid."""
        if self.is_valid:
            return
        exc_class = _REJECTIONS[self.outcome]
        reason = self.invalid_reason or "Verification failed"
        if exc_class is SignatureError:
            raise SignatureError(reason, recovered=self.recovered_signer)
        raise exc_class(reason)

    def to_dict(self) -> dict:
        """Serialize in the x402 facilitator response shape."""
        return {
            "isValid": self.is_valid,
            "invalidReason": self.invalid_reason,
            "payer": self.payer,
        }

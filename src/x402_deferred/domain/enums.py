"""Domain enumerations for the deferred-scheme facilitator.

Framework-agnostic (no FastAPI, no web3 imports).
"""

import enum


class VerificationOutcome(enum.StrEnum):
    """Tag describing which stage of the pipeline decided a verification.

    Exactly one outcome is attached to every VerificationResult. The first
    members mirror the order of the pipeline stages. UNSUPPORTED_PAYMENT is
    assigned by the service layer when the x402 envelope names another
    scheme or network, before the pipeline runs.
    """

    FIELDS_INVALID = "FIELDS_INVALID"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    SIGNER_MISMATCH = "SIGNER_MISMATCH"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    VERIFICATION_FAULT = "VERIFICATION_FAULT"
    UNSUPPORTED_PAYMENT = "UNSUPPORTED_PAYMENT"
    VALID = "VALID"


class PaymentScheme(enum.StrEnum):
    """x402 payment schemes. Only the deferred scheme is verified here."""

    EXACT = "exact"
    DEFERRED = "deferred"

"""Pydantic API schemas."""

from x402_deferred.schemas.x402 import (
    ClaimPreparationResponse,
    DeferredPayloadSchema,
    EIP712DomainSchema,
    HealthResponse,
    PaymentPayloadSchema,
    PaymentRequirementsSchema,
    SchemeInfoResponse,
    VerifyRequest,
    VerifyResponse,
    VoucherSchema,
)

__all__ = [
    "ClaimPreparationResponse",
    "DeferredPayloadSchema",
    "EIP712DomainSchema",
    "HealthResponse",
    "PaymentPayloadSchema",
    "PaymentRequirementsSchema",
    "SchemeInfoResponse",
    "VerifyRequest",
    "VerifyResponse",
    "VoucherSchema",
]

"""Pydantic schemas for the x402 facilitator API.

Wire names are camelCase (x402 convention); Python attributes are
snake_case. Numeric voucher fields are accepted as strings or ints and are
passed through untouched: the verifier coerces them, so a malformed number
comes back as an invalid result rather than a 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from x402_deferred.domain.voucher import DeferredPayload, PaymentRequirements, Voucher


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, populate by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class VoucherSchema(CamelModel):
    """EIP-712 Voucher as sent by the buyer."""

    id: str = Field(
        ...,
        description="bytes32 voucher id (0x-prefixed hex)",
        examples=["0x" + "ab" * 32],
    )
    buyer: str = Field(..., description="Buyer address (the signer)")
    seller: str = Field(..., description="Seller address (must equal payTo)")
    value_aggregate: str | int = Field(..., description="Cumulative authorized amount (uint256)")
    asset: str = Field(..., description="ERC-20 token address")
    timestamp: str | int = Field(..., description="Creation time, unix seconds (uint64)")
    nonce: str | int = Field(..., description="Voucher nonce (uint256)")
    escrow: str = Field(..., description="Escrow contract address")
    chain_id: str | int = Field(..., description="Target chain id (uint256)")

    def to_domain(self) -> Voucher:
        return Voucher(
            id=self.id,
            buyer=self.buyer,
            seller=self.seller,
            value_aggregate=self.value_aggregate,
            asset=self.asset,
            timestamp=self.timestamp,
            nonce=self.nonce,
            escrow=self.escrow,
            chain_id=self.chain_id,
        )


class DeferredPayloadSchema(CamelModel):
    """Scheme-specific payload of a deferred payment."""

    voucher: VoucherSchema
    signature: str = Field(..., description="65-byte EIP-712 signature (0x-prefixed hex)")

    def to_domain(self) -> DeferredPayload:
        return DeferredPayload(voucher=self.voucher.to_domain(), signature=self.signature)


class PaymentPayloadSchema(CamelModel):
    """x402 PaymentPayload envelope."""

    x402_version: int = Field(default=1, alias="x402Version")
    scheme: str = Field(..., examples=["deferred"])
    network: str = Field(..., examples=["base-sepolia"])
    payload: DeferredPayloadSchema


class PaymentRequirementsSchema(CamelModel):
    """x402 PaymentRequirements as published by the resource server."""

    scheme: str = Field(..., examples=["deferred"])
    network: str = Field(..., examples=["base-sepolia"])
    max_amount_required: str | int = Field(..., examples=["1000000"])
    resource: str = ""
    description: str = ""
    mime_type: str = ""
    pay_to: str
    max_timeout_seconds: int = 0
    asset: str
    extra: dict[str, Any] | None = None

    def to_domain(self) -> PaymentRequirements:
        return PaymentRequirements(
            pay_to=self.pay_to,
            max_amount_required=self.max_amount_required,
            asset=self.asset,
            scheme=self.scheme,
            network=self.network,
            resource=self.resource,
            description=self.description,
            mime_type=self.mime_type,
            max_timeout_seconds=self.max_timeout_seconds,
            extra=self.extra or {},
        )


class VerifyRequest(CamelModel):
    """Body of POST /api/v1/deferred/verify."""

    x402_version: int = Field(default=1, alias="x402Version")
    payment_payload: PaymentPayloadSchema
    payment_requirements: PaymentRequirementsSchema


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class VerifyResponse(CamelModel):
    """Facilitator verification verdict."""

    is_valid: bool
    invalid_reason: str | None = None
    payer: str | None = None


class EIP712DomainSchema(CamelModel):
    name: str
    version: str
    chain_id: int
    verifying_contract: str


class SchemeInfoResponse(CamelModel):
    """What this facilitator instance verifies against."""

    scheme: str = "deferred"
    network: str
    chain_id: int
    escrow_address: str
    domain: EIP712DomainSchema


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    network: str = "unknown"
    ledger: str = "unknown"


class ClaimPreparationResponse(CamelModel):
    """Arguments for the seller's claimVoucher call on a verified voucher.

    The facilitator does not send the transaction; this is what the seller
    submits to the escrow contract.
    """

    escrow: str
    function_name: str = "claimVoucher"
    voucher: list[str]
    signature: str
    payer: str

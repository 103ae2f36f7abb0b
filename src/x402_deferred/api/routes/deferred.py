"""Deferred-scheme facilitator REST API routes.

Routes:
    POST   /api/v1/deferred/verify         — Verify a signed voucher
    POST   /api/v1/deferred/prepare-claim  — Verify, then return claimVoucher args
    GET    /api/v1/deferred/info           — Network, escrow and EIP-712 domain

/verify answers 200 for valid and invalid vouchers alike; the verdict is in
the body. /prepare-claim raises on an invalid voucher so the error
middleware maps it onto a 4xx status.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from x402_deferred.api.deps import get_verification_service
from x402_deferred.infrastructure.escrow_abi import create_voucher_tuple
from x402_deferred.logging_config import get_logger
from x402_deferred.schemas.x402 import (
    ClaimPreparationResponse,
    EIP712DomainSchema,
    SchemeInfoResponse,
    VerifyRequest,
    VerifyResponse,
)
from x402_deferred.services.verification_service import VerificationService

router = APIRouter(prefix="/api/v1/deferred", tags=["Deferred"])
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Verify
# ---------------------------------------------------------------------------


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify a deferred-scheme voucher",
)
async def verify_voucher(
    request: VerifyRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyResponse:
    """Run the voucher verification pipeline and return the verdict."""
    result = await service.verify(request)
    return VerifyResponse(
        is_valid=result.is_valid,
        invalid_reason=result.invalid_reason,
        payer=result.payer,
    )


# ---------------------------------------------------------------------------
# Prepare claim
# ---------------------------------------------------------------------------


@router.post(
    "/prepare-claim",
    response_model=ClaimPreparationResponse,
    summary="Verify a voucher and return the claimVoucher call arguments",
)
async def prepare_claim(
    request: VerifyRequest,
    service: VerificationService = Depends(get_verification_service),
) -> ClaimPreparationResponse:
    """Return the settlement arguments for a voucher that verifies."""
    result = await service.verify(request)
    result.raise_for_invalid()

    payload = request.payment_payload.payload
    voucher_tuple = create_voucher_tuple(payload.voucher.to_domain())
    logger.info("claim.prepared", voucher_id=payload.voucher.id, payer=result.payer)

    return ClaimPreparationResponse(
        escrow=service.verifier.escrow_address,
        voucher=[
            "0x" + item.hex() if isinstance(item, bytes) else str(item)
            for item in voucher_tuple
        ],
        signature=payload.signature,
        payer=result.payer,
    )


# ---------------------------------------------------------------------------
# Info
# ---------------------------------------------------------------------------


@router.get(
    "/info",
    response_model=SchemeInfoResponse,
    summary="Describe the escrow deployment this facilitator verifies against",
)
async def scheme_info(
    service: VerificationService = Depends(get_verification_service),
) -> SchemeInfoResponse:
    verifier = service.verifier
    domain = verifier.get_eip712_domain()
    return SchemeInfoResponse(
        network=verifier.network,
        chain_id=verifier.chain_id,
        escrow_address=verifier.escrow_address,
        domain=EIP712DomainSchema(
            name=domain.name,
            version=domain.version,
            chain_id=domain.chain_id,
            verifying_contract=domain.verifying_contract,
        ),
    )

"""DeferredSchemeVerifier — decides whether a signed voucher may be settled.

Verification flow (strictly ordered, stops at the first failure):
    1. Validate voucher fields against config and requirements (no I/O).
    2. Recover the EIP-712 signer from the signature.
    3. Check the recovered signer is the voucher's buyer.
    4. Ask the ledger whether (id, nonce) was already claimed.
    5. Ask the ledger for the available escrow balance.

Steps 1-3 are synchronous. Steps 4 and 5 are the only suspension points.
Every path returns a VerificationResult; an unexpected fault becomes an
invalid result carrying the fault's message.

Configuration is fixed at construction. Concurrent verify() calls on the
same instance share nothing mutable except the ledger gateway.
"""

from __future__ import annotations

from x402_deferred.domain.enums import VerificationOutcome
from x402_deferred.domain.ledger_protocol import (
    LedgerStateGateway,
    resolve_available_balance,
    resolve_claim_status,
)
from x402_deferred.domain.results import VerificationResult
from x402_deferred.domain.voucher import (
    DeferredPayload,
    DeferredSchemeConfig,
    PaymentRequirements,
    Voucher,
    same_address,
    to_uint,
)
from x402_deferred.infrastructure.chains import resolve_network
from x402_deferred.infrastructure.ledger_gateway import Web3LedgerGateway
from x402_deferred.logging_config import get_logger
from x402_deferred.verifiers.field_validator import find_field_mismatches
from x402_deferred.verifiers.signature import SignerRecovery, recover_signer
from x402_deferred.verifiers.typed_data import EIP712Domain, create_eip712_domain

logger = get_logger(__name__)

REASON_FIELDS_INVALID = "Voucher fields invalid"
REASON_INVALID_SIGNATURE = "Invalid signature"
REASON_ALREADY_CLAIMED = "Voucher already claimed"
REASON_INSUFFICIENT_BALANCE = "Insufficient escrow balance"
REASON_FAULT_FALLBACK = "Verification failed"


class DeferredSchemeVerifier:
    """Verifier for x402 deferred-scheme vouchers against one escrow deployment."""

    def __init__(
        self,
        config: DeferredSchemeConfig,
        ledger: LedgerStateGateway | None = None,
        *,
        request_timeout: float = 10,
        read_attempts: int = 2,
    ) -> None:
        """Resolve the network and bind the ledger gateway.

        Args:
            config: Immutable network / escrow / domain configuration.
            ledger: Gateway to read escrow state through. Defaults to a
                Web3LedgerGateway on the resolved RPC endpoint.
            request_timeout: HTTP timeout for the default gateway.
            read_attempts: Attempts per read for the default gateway.

        Raises:
            UnsupportedNetworkError: If the network cannot be resolved to a
                known chain and RPC endpoint.
        """
        chain, rpc_url = resolve_network(config.network, config.rpc_url)

        self._config = config
        self._chain_id = chain.chain_id
        self._domain = create_eip712_domain(
            chain.chain_id,
            config.escrow_address,
            config.domain_name,
            config.domain_version,
        )
        if ledger is None:
            ledger = Web3LedgerGateway(
                rpc_url,
                config.escrow_address,
                request_timeout=request_timeout,
                read_attempts=read_attempts,
            )
        self._ledger: LedgerStateGateway = ledger

        logger.info(
            "verifier.deferred.configured",
            network=config.network,
            chain_id=self._chain_id,
            escrow=config.escrow_address,
            ledger=type(self._ledger).__name__,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def network(self) -> str:
        return self._config.network

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def escrow_address(self) -> str:
        return self._config.escrow_address

    @property
    def ledger(self) -> LedgerStateGateway:
        return self._ledger

    def get_eip712_domain(self) -> EIP712Domain:
        return self._domain

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def verify(
        self, payload: DeferredPayload, requirements: PaymentRequirements
    ) -> VerificationResult:
        """Run the full verification pipeline for one voucher.

        Returns:
            A VerificationResult; never raises.
        """
        try:
            return await self._verify(payload, requirements)
        except Exception as exc:
            logger.exception("verifier.deferred.fault", error=str(exc))
            return VerificationResult.invalid(
                VerificationOutcome.VERIFICATION_FAULT,
                str(exc) or REASON_FAULT_FALLBACK,
            )

    async def _verify(
        self, payload: DeferredPayload, requirements: PaymentRequirements
    ) -> VerificationResult:
        voucher = payload.voucher
        log = logger.bind(voucher_id=voucher.id, buyer=voucher.buyer, seller=voucher.seller)

        # --- Step 1: Field validation ---
        mismatches = find_field_mismatches(
            voucher,
            requirements,
            escrow_address=self._config.escrow_address,
            chain_id=self._chain_id,
        )
        if mismatches:
            log.info("verifier.deferred.fields_invalid", mismatches=mismatches)
            return VerificationResult.invalid(
                VerificationOutcome.FIELDS_INVALID, REASON_FIELDS_INVALID
            )

        # --- Step 2: Signer recovery ---
        recovery = self.recover_signer(voucher, payload.signature)
        if not recovery.ok:
            log.info("verifier.deferred.invalid_signature", error=recovery.error)
            return VerificationResult.invalid(
                VerificationOutcome.INVALID_SIGNATURE, REASON_INVALID_SIGNATURE
            )
        signer = recovery.signer

        # --- Step 3: Signer must be the buyer ---
        if not same_address(signer, voucher.buyer):
            log.info("verifier.deferred.signer_mismatch", recovered=signer)
            return VerificationResult.invalid(
                VerificationOutcome.SIGNER_MISMATCH,
                f"Signer does not match buyer. Recovered: {signer}, Expected: {voucher.buyer}",
                recovered_signer=signer,
            )

        # --- Step 4: Replay check ---
        if await self.is_voucher_claimed(voucher.id, to_uint(voucher.nonce, "nonce")):
            log.info("verifier.deferred.already_claimed", nonce=str(voucher.nonce))
            return VerificationResult.invalid(
                VerificationOutcome.ALREADY_CLAIMED,
                REASON_ALREADY_CLAIMED,
                recovered_signer=signer,
            )

        # --- Step 5: Escrow balance ---
        balance = await self.get_escrow_balance(voucher.buyer, voucher.seller, voucher.asset)
        value_aggregate = to_uint(voucher.value_aggregate, "valueAggregate")
        if balance < value_aggregate:
            log.info(
                "verifier.deferred.insufficient_balance",
                balance=str(balance),
                value_aggregate=str(value_aggregate),
            )
            return VerificationResult.invalid(
                VerificationOutcome.INSUFFICIENT_BALANCE,
                REASON_INSUFFICIENT_BALANCE,
                recovered_signer=signer,
            )

        log.info("verifier.deferred.valid", value_aggregate=str(value_aggregate))
        return VerificationResult.valid(payer=voucher.buyer, recovered_signer=signer)

    # ------------------------------------------------------------------
    # Individual stages
    # ------------------------------------------------------------------

    def validate_voucher(self, voucher: Voucher, requirements: PaymentRequirements) -> bool:
        """Field checks only. See verifiers/field_validator.py."""
        return not find_field_mismatches(
            voucher,
            requirements,
            escrow_address=self._config.escrow_address,
            chain_id=self._chain_id,
        )

    def recover_signer(self, voucher: Voucher, signature: str) -> SignerRecovery:
        """Recover the signer of `voucher` under this verifier's domain."""
        return recover_signer(self._domain, voucher, signature)

    async def is_voucher_claimed(self, voucher_id: str, nonce: int) -> bool:
        """Claim status with failed reads counted as unclaimed."""
        read = await self._ledger.is_voucher_claimed(voucher_id, nonce)
        if not read.ok:
            logger.warning(
                "verifier.deferred.claim_status_unavailable",
                voucher_id=voucher_id,
                error=read.error,
            )
        return resolve_claim_status(read)

    async def get_escrow_balance(self, buyer: str, seller: str, asset: str) -> int:
        """Available balance with failed reads counted as zero."""
        read = await self._ledger.get_available_balance(buyer, seller, asset)
        if not read.ok:
            logger.warning(
                "verifier.deferred.balance_unavailable",
                buyer=buyer,
                seller=seller,
                asset=asset,
                error=read.error,
            )
        return resolve_available_balance(read)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the ledger gateway's connections, if it holds any."""
        aclose = getattr(self._ledger, "aclose", None)
        if aclose is not None:
            await aclose()

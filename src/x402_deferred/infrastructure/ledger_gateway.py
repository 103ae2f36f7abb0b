"""Ledger State Gateway implementations.

Web3LedgerGateway reads the deferred escrow contract over JSON-RPC with
web3.py's AsyncWeb3. Transient failures are retried with tenacity; a read
that still fails is logged and returned as LedgerRead.failure(), so the
pipeline never sees an exception from here.

InMemoryLedgerGateway is a deterministic stand-in with zero network calls,
used by the dry-run simulation and the test suite.
"""

from __future__ import annotations

from typing import Any

import aiohttp
from eth_utils import to_checksum_address
from tenacity import (
    AsyncRetrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from x402_deferred.domain.exceptions import LedgerQueryError
from x402_deferred.domain.ledger_protocol import LedgerRead
from x402_deferred.domain.voucher import same_address, to_bytes32
from x402_deferred.infrastructure.escrow_abi import DEFERRED_ESCROW_ABI
from x402_deferred.logging_config import get_logger

logger = get_logger(__name__)

# Reverts and undecodable output will not change on retry
_PERMANENT_ERRORS = (ContractLogicError, BadFunctionCallOutput, ValueError)


class Web3LedgerGateway:
    """Reads claim status and available balance from the escrow contract."""

    def __init__(
        self,
        rpc_url: str,
        escrow_address: str,
        *,
        request_timeout: float = 10,
        read_attempts: int = 2,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            rpc_url: JSON-RPC endpoint of the chain the escrow lives on.
            escrow_address: Deferred escrow contract address.
            request_timeout: Per-request HTTP timeout in seconds.
            read_attempts: Total attempts per read, including the first.
            w3: Pre-built AsyncWeb3 instance (overrides rpc_url).
        """
        self._rpc_url = rpc_url
        self._read_attempts = max(1, read_attempts)
        self._w3 = w3 or AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            )
        )
        self._contract = self._w3.eth.contract(
            address=to_checksum_address(escrow_address),
            abi=DEFERRED_ESCROW_ABI,
        )

    async def _read(self, function_name: str, *args: Any) -> Any:
        """Call a view function, retrying transient transport failures.

        Raises:
            LedgerQueryError: If every attempt failed.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._read_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
                retry=retry_if_not_exception_type(_PERMANENT_ERRORS),
                reraise=True,
            ):
                with attempt:
                    function = getattr(self._contract.functions, function_name)
                    return await function(*args).call()
        except Exception as exc:
            raise LedgerQueryError(function_name, str(exc) or exc.__class__.__name__) from exc

    async def is_voucher_claimed(self, voucher_id: str, nonce: int) -> LedgerRead[bool]:
        try:
            claimed = await self._read("voucherClaimed", to_bytes32(voucher_id), nonce)
        except (LedgerQueryError, ValueError) as exc:
            logger.warning(
                "ledger.read_failed",
                function="voucherClaimed",
                voucher_id=voucher_id,
                error=str(exc),
            )
            return LedgerRead.failure(str(exc))
        return LedgerRead.success(bool(claimed))

    async def get_available_balance(
        self, buyer: str, seller: str, asset: str
    ) -> LedgerRead[int]:
        try:
            balance = await self._read(
                "getAvailableBalance",
                to_checksum_address(buyer),
                to_checksum_address(seller),
                to_checksum_address(asset),
            )
        except (LedgerQueryError, ValueError) as exc:
            logger.warning(
                "ledger.read_failed",
                function="getAvailableBalance",
                buyer=buyer,
                seller=seller,
                asset=asset,
                error=str(exc),
            )
            return LedgerRead.failure(str(exc))
        return LedgerRead.success(int(balance))

    async def is_connected(self) -> bool:
        """Whether the RPC endpoint answers. Used by the health check."""
        try:
            return bool(await self._w3.is_connected())
        except Exception as exc:
            logger.warning("ledger.connection_check_failed", rpc_url=self._rpc_url, error=str(exc))
            return False

    async def aclose(self) -> None:
        """Close the provider's HTTP session. Called during app shutdown."""
        await self._w3.provider.disconnect()
        logger.info("ledger.disconnected", rpc_url=self._rpc_url)


class InMemoryLedgerGateway:
    """Deterministic in-memory escrow state for dry runs and tests.

    Knobs:
        - mark_claimed(voucher_id, nonce): settle a voucher.
        - set_balance(buyer, seller, asset, amount): fund an escrow triple.
        - fail_claim_reads / fail_balance_reads: make reads return failures.

    claim_queries and balance_queries count the reads issued, so tests can
    assert that a rejected voucher never reached the ledger.
    """

    def __init__(self) -> None:
        self._claimed: set[tuple[str, int]] = set()
        self._balances: list[tuple[str, str, str, int]] = []
        self.fail_claim_reads = False
        self.fail_balance_reads = False
        self.claim_queries = 0
        self.balance_queries = 0

    def mark_claimed(self, voucher_id: str, nonce: int) -> None:
        self._claimed.add((voucher_id.lower(), int(nonce)))

    def set_balance(self, buyer: str, seller: str, asset: str, amount: int) -> None:
        self._balances = [
            entry
            for entry in self._balances
            if not (
                same_address(entry[0], buyer)
                and same_address(entry[1], seller)
                and same_address(entry[2], asset)
            )
        ]
        self._balances.append((buyer, seller, asset, int(amount)))

    async def is_voucher_claimed(self, voucher_id: str, nonce: int) -> LedgerRead[bool]:
        self.claim_queries += 1
        if self.fail_claim_reads:
            return LedgerRead.failure("simulated voucherClaimed failure")
        return LedgerRead.success((voucher_id.lower(), int(nonce)) in self._claimed)

    async def get_available_balance(
        self, buyer: str, seller: str, asset: str
    ) -> LedgerRead[int]:
        self.balance_queries += 1
        if self.fail_balance_reads:
            return LedgerRead.failure("simulated getAvailableBalance failure")
        for entry_buyer, entry_seller, entry_asset, amount in self._balances:
            if (
                same_address(entry_buyer, buyer)
                and same_address(entry_seller, seller)
                and same_address(entry_asset, asset)
            ):
                return LedgerRead.success(amount)
        return LedgerRead.success(0)

    async def is_connected(self) -> bool:
        return True

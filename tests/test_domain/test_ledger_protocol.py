"""Tests for the ledger read-failure policy.

A failed claim-status read must let the voucher through to the balance
check; a failed balance read must look like an empty escrow.
"""

from __future__ import annotations

from x402_deferred.domain.ledger_protocol import (
    LedgerRead,
    LedgerStateGateway,
    resolve_available_balance,
    resolve_claim_status,
)
from x402_deferred.infrastructure.ledger_gateway import InMemoryLedgerGateway


class TestLedgerRead:
    def test_success(self) -> None:
        read = LedgerRead.success(False)
        assert read.ok is True
        assert read.value is False

    def test_failure(self) -> None:
        read = LedgerRead.failure("connection refused")
        assert read.ok is False
        assert read.value is None
        assert read.error == "connection refused"

    def test_failure_with_empty_message_is_still_a_failure(self) -> None:
        assert LedgerRead.failure("").ok is False


class TestClaimStatusPolicy:
    def test_claimed(self) -> None:
        assert resolve_claim_status(LedgerRead.success(True)) is True

    def test_unclaimed(self) -> None:
        assert resolve_claim_status(LedgerRead.success(False)) is False

    def test_failed_read_counts_as_unclaimed(self) -> None:
        assert resolve_claim_status(LedgerRead.failure("timeout")) is False


class TestBalancePolicy:
    def test_balance(self) -> None:
        assert resolve_available_balance(LedgerRead.success(10**30)) == 10**30

    def test_zero_balance(self) -> None:
        assert resolve_available_balance(LedgerRead.success(0)) == 0

    def test_failed_read_counts_as_zero(self) -> None:
        assert resolve_available_balance(LedgerRead.failure("execution reverted")) == 0


class TestProtocol:
    def test_in_memory_gateway_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryLedgerGateway(), LedgerStateGateway)

"""Tests for the ledger gateways.

Web3LedgerGateway is exercised against a mocked AsyncWeb3 so that the
retry and failure-to-LedgerRead mapping can be checked without a node.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import ContractLogicError

from x402_deferred.infrastructure.ledger_gateway import InMemoryLedgerGateway, Web3LedgerGateway

ESCROW = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
BUYER = "0x2c7536e3605d9c16a7a3d7b1898e529396a65c23"
SELLER = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
ASSET = "0x036cbd53842c5426634e7929541ec2318f3dcf7e"
VOUCHER_ID = "0x" + "7a" * 32


def _gateway(read_attempts: int = 1) -> tuple[Web3LedgerGateway, MagicMock]:
    w3 = MagicMock()
    gateway = Web3LedgerGateway(
        "http://localhost:8545", ESCROW, read_attempts=read_attempts, w3=w3
    )
    return gateway, w3


def _stub_call(w3: MagicMock, function_name: str, **call_kwargs) -> MagicMock:
    call = AsyncMock(**call_kwargs)
    function = getattr(w3.eth.contract.return_value.functions, function_name)
    function.return_value.call = call
    return function


class TestWeb3LedgerGatewayClaimStatus:
    @pytest.mark.asyncio
    async def test_claimed(self) -> None:
        gateway, w3 = _gateway()
        function = _stub_call(w3, "voucherClaimed", return_value=True)

        read = await gateway.is_voucher_claimed(VOUCHER_ID, 3)

        assert read.ok is True
        assert read.value is True
        function.assert_called_once_with(bytes.fromhex("7a" * 32), 3)

    @pytest.mark.asyncio
    async def test_unclaimed(self) -> None:
        gateway, w3 = _gateway()
        _stub_call(w3, "voucherClaimed", return_value=False)

        read = await gateway.is_voucher_claimed(VOUCHER_ID, 1)

        assert read.ok is True
        assert read.value is False

    @pytest.mark.asyncio
    async def test_transport_error_becomes_failure(self) -> None:
        gateway, w3 = _gateway()
        _stub_call(w3, "voucherClaimed", side_effect=ConnectionError("connection refused"))

        read = await gateway.is_voucher_claimed(VOUCHER_ID, 1)

        assert read.ok is False
        assert "voucherClaimed" in read.error
        assert "connection refused" in read.error

    @pytest.mark.asyncio
    async def test_malformed_id_becomes_failure_without_rpc(self) -> None:
        gateway, w3 = _gateway()
        function = _stub_call(w3, "voucherClaimed", return_value=False)

        read = await gateway.is_voucher_claimed("0x1234", 1)

        assert read.ok is False
        assert "32 bytes" in read.error
        function.assert_not_called()


class TestWeb3LedgerGatewayBalance:
    @pytest.mark.asyncio
    async def test_balance(self) -> None:
        gateway, w3 = _gateway()
        function = _stub_call(w3, "getAvailableBalance", return_value=10**24)

        read = await gateway.get_available_balance(BUYER, SELLER, ASSET)

        assert read.ok is True
        assert read.value == 10**24
        function.assert_called_once_with(
            "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23",
            "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
            "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        )

    @pytest.mark.asyncio
    async def test_revert_is_not_retried(self) -> None:
        gateway, w3 = _gateway(read_attempts=3)
        function = _stub_call(
            w3, "getAvailableBalance", side_effect=ContractLogicError("execution reverted")
        )

        read = await gateway.get_available_balance(BUYER, SELLER, ASSET)

        assert read.ok is False
        assert function.return_value.call.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self) -> None:
        gateway, w3 = _gateway(read_attempts=2)
        function = _stub_call(
            w3, "getAvailableBalance", side_effect=[TimeoutError("read timed out"), 42]
        )

        read = await gateway.get_available_balance(BUYER, SELLER, ASSET)

        assert read.ok is True
        assert read.value == 42
        assert function.return_value.call.await_count == 2

    @pytest.mark.asyncio
    async def test_malformed_address_becomes_failure(self) -> None:
        gateway, w3 = _gateway()
        _stub_call(w3, "getAvailableBalance", return_value=1)

        read = await gateway.get_available_balance("not-an-address", SELLER, ASSET)

        assert read.ok is False


class TestWeb3LedgerGatewayConnection:
    @pytest.mark.asyncio
    async def test_connected(self) -> None:
        gateway, w3 = _gateway()
        w3.is_connected = AsyncMock(return_value=True)
        assert await gateway.is_connected() is True

    @pytest.mark.asyncio
    async def test_connection_error_reports_false(self) -> None:
        gateway, w3 = _gateway()
        w3.is_connected = AsyncMock(side_effect=OSError("unreachable"))
        assert await gateway.is_connected() is False

    @pytest.mark.asyncio
    async def test_aclose_disconnects_provider(self) -> None:
        gateway, w3 = _gateway()
        w3.provider.disconnect = AsyncMock()

        await gateway.aclose()

        w3.provider.disconnect.assert_awaited_once()


class TestInMemoryLedgerGateway:
    @pytest.mark.asyncio
    async def test_unfunded_triple_reads_zero(self) -> None:
        read = await InMemoryLedgerGateway().get_available_balance(BUYER, SELLER, ASSET)
        assert read.ok is True
        assert read.value == 0

    @pytest.mark.asyncio
    async def test_balance_lookup_ignores_case(self) -> None:
        gateway = InMemoryLedgerGateway()
        gateway.set_balance(BUYER.upper().replace("0X", "0x"), SELLER, ASSET, 77)

        shouted_seller = SELLER.upper().replace("0X", "0x")
        read = await gateway.get_available_balance(BUYER, shouted_seller, ASSET)

        assert read.value == 77

    @pytest.mark.asyncio
    async def test_set_balance_replaces(self) -> None:
        gateway = InMemoryLedgerGateway()
        gateway.set_balance(BUYER, SELLER, ASSET, 10)
        gateway.set_balance(BUYER, SELLER, ASSET, 20)

        assert (await gateway.get_available_balance(BUYER, SELLER, ASSET)).value == 20

    @pytest.mark.asyncio
    async def test_claims_are_keyed_by_id_and_nonce(self) -> None:
        gateway = InMemoryLedgerGateway()
        gateway.mark_claimed(VOUCHER_ID.upper().replace("0X", "0x"), 1)

        assert (await gateway.is_voucher_claimed(VOUCHER_ID, 1)).value is True
        assert (await gateway.is_voucher_claimed(VOUCHER_ID, 2)).value is False
        assert gateway.claim_queries == 2

    @pytest.mark.asyncio
    async def test_simulated_failures(self) -> None:
        gateway = InMemoryLedgerGateway()
        gateway.fail_claim_reads = True
        gateway.fail_balance_reads = True

        claim = await gateway.is_voucher_claimed(VOUCHER_ID, 1)
        balance = await gateway.get_available_balance(BUYER, SELLER, ASSET)

        assert claim.ok is False
        assert balance.ok is False
        assert gateway.balance_queries == 1

    @pytest.mark.asyncio
    async def test_always_connected(self) -> None:
        assert await InMemoryLedgerGateway().is_connected() is True

"""Shared test fixtures for the deferred-scheme facilitator test suite.

Provides:
    - A fixed buyer key and the addresses of one escrow deployment
    - Factory fixtures for vouchers, signatures, payloads and requirements
    - A funded in-memory ledger and a verifier bound to it

Signatures are produced with eth_account from a full EIP-712 document
written out by hand here, independently of x402_deferred.verifiers.typed_data,
so a mistake in the production schema cannot sign and verify itself.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import to_checksum_address

from x402_deferred.domain.voucher import (
    DeferredPayload,
    DeferredSchemeConfig,
    PaymentRequirements,
    Voucher,
)
from x402_deferred.infrastructure.ledger_gateway import InMemoryLedgerGateway
from x402_deferred.verifiers.deferred import DeferredSchemeVerifier

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BUYER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_KEY = "0x8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"

NETWORK = "base-sepolia"
CHAIN_ID = 84532
ESCROW = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
SELLER = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
ASSET = "0x036cbd53842c5426634e7929541ec2318f3dcf7e"
VOUCHER_ID = "0x" + "7a" * 32
TIMESTAMP = 1_700_000_000

MAX_AMOUNT = "1000000"
VALUE = "500000"
BALANCE = 1_000_000

_EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

_VOUCHER_TYPE = [
    {"name": "id", "type": "bytes32"},
    {"name": "buyer", "type": "address"},
    {"name": "seller", "type": "address"},
    {"name": "valueAggregate", "type": "uint256"},
    {"name": "asset", "type": "address"},
    {"name": "timestamp", "type": "uint64"},
    {"name": "nonce", "type": "uint256"},
    {"name": "escrow", "type": "address"},
    {"name": "chainId", "type": "uint256"},
]


def _sign(
    voucher: Voucher,
    private_key: str = BUYER_KEY,
    *,
    domain_name: str = "X402DeferredEscrow",
    domain_version: str = "1",
    chain_id: int = CHAIN_ID,
    verifying_contract: str = ESCROW,
) -> str:
    full_message: dict[str, Any] = {
        "types": {"EIP712Domain": _EIP712_DOMAIN_TYPE, "Voucher": _VOUCHER_TYPE},
        "primaryType": "Voucher",
        "domain": {
            "name": domain_name,
            "version": domain_version,
            "chainId": chain_id,
            "verifyingContract": to_checksum_address(verifying_contract),
        },
        "message": {
            "id": bytes.fromhex(voucher.id.removeprefix("0x")),
            "buyer": to_checksum_address(voucher.buyer),
            "seller": to_checksum_address(voucher.seller),
            "valueAggregate": int(voucher.value_aggregate),
            "asset": to_checksum_address(voucher.asset),
            "timestamp": int(voucher.timestamp),
            "nonce": int(voucher.nonce),
            "escrow": to_checksum_address(voucher.escrow),
            "chainId": int(voucher.chain_id),
        },
    }
    signed = Account.sign_message(encode_typed_data(full_message=full_message), private_key)
    return "0x" + bytes(signed.signature).hex()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture
def buyer_address() -> str:
    """Checksummed address of the test buyer key."""
    return Account.from_key(BUYER_KEY).address


@pytest.fixture
def other_address() -> str:
    return Account.from_key(OTHER_KEY).address


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_voucher(buyer_address: str) -> Callable[..., Voucher]:
    """Return a factory for vouchers that match every default requirement."""

    def _make(**overrides: Any) -> Voucher:
        fields: dict[str, Any] = {
            "id": VOUCHER_ID,
            "buyer": buyer_address,
            "seller": SELLER,
            "value_aggregate": VALUE,
            "asset": ASSET,
            "timestamp": str(TIMESTAMP),
            "nonce": "1",
            "escrow": ESCROW,
            "chain_id": str(CHAIN_ID),
        }
        fields.update(overrides)
        return Voucher(**fields)

    return _make


@pytest.fixture
def sign_voucher() -> Callable[..., str]:
    """Return a signer: sign_voucher(voucher, private_key=BUYER_KEY, **domain)."""
    return _sign


@pytest.fixture
def make_payload(
    make_voucher: Callable[..., Voucher],
) -> Callable[..., DeferredPayload]:
    """Return a factory for payloads signed by the buyer key."""

    def _make(signature: str | None = None, **voucher_overrides: Any) -> DeferredPayload:
        voucher = make_voucher(**voucher_overrides)
        return DeferredPayload(voucher=voucher, signature=signature or _sign(voucher))

    return _make


@pytest.fixture
def make_requirements() -> Callable[..., PaymentRequirements]:
    def _make(**overrides: Any) -> PaymentRequirements:
        fields: dict[str, Any] = {
            "pay_to": SELLER,
            "max_amount_required": MAX_AMOUNT,
            "asset": ASSET,
            "scheme": "deferred",
            "network": NETWORK,
            "resource": "https://api.example.com/premium",
        }
        fields.update(overrides)
        return PaymentRequirements(**fields)

    return _make


# ---------------------------------------------------------------------------
# Ledger and verifier
# ---------------------------------------------------------------------------


@pytest.fixture
def ledger(buyer_address: str) -> InMemoryLedgerGateway:
    """In-memory ledger with the default buyer/seller/asset escrow funded."""
    gateway = InMemoryLedgerGateway()
    gateway.set_balance(buyer_address, SELLER, ASSET, BALANCE)
    return gateway


@pytest.fixture
def deferred_config() -> DeferredSchemeConfig:
    return DeferredSchemeConfig(network=NETWORK, escrow_address=ESCROW)


@pytest.fixture
def verifier(
    deferred_config: DeferredSchemeConfig, ledger: InMemoryLedgerGateway
) -> DeferredSchemeVerifier:
    return DeferredSchemeVerifier(deferred_config, ledger=ledger)

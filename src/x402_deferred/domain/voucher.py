"""Voucher, payload and requirements value objects.

Numeric voucher fields travel as decimal strings on the wire, so the
dataclasses here keep whatever the caller supplied. Coercion to Python ints
happens inside the verification pipeline via to_uint(), which means a
malformed number surfaces as a structured invalid result instead of an
exception at parse time.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field
from typing import Any

DEFAULT_DOMAIN_NAME = "X402DeferredEscrow"
DEFAULT_DOMAIN_VERSION = "1"

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

UIntLike = int | str

# ASCII digits only; int() alone would also take "1_000" and full-width digits
_DECIMAL_RE = re.compile(r"-?[0-9]+")
_HEX_RE = re.compile(r"0[xX][0-9a-fA-F]+")


@dataclass(frozen=True)
class Voucher:
    """A buyer-signed statement of cumulative debt toward a seller.

    Attributes:
        id: bytes32 hex identifier, shared by every voucher in one lineage.
        buyer: Address of the signer whose escrow is debited.
        seller: Address allowed to claim the voucher.
        value_aggregate: Cumulative amount authorized so far (uint256).
        asset: ERC-20 token address.
        timestamp: Creation time in seconds (uint64).
        nonce: Together with id, keys the on-chain claim status (uint256).
        escrow: Escrow contract address the voucher is bound to.
        chain_id: Target chain (uint256).
    """

    id: str
    buyer: str
    seller: str
    value_aggregate: UIntLike
    asset: str
    timestamp: UIntLike
    nonce: UIntLike
    escrow: str
    chain_id: UIntLike


@dataclass(frozen=True)
class DeferredPayload:
    """A voucher plus the buyer's 65-byte EIP-712 signature (0x hex)."""

    voucher: Voucher
    signature: str


@dataclass(frozen=True)
class PaymentRequirements:
    """What the resource server expects to be paid.

    Only pay_to, max_amount_required and asset take part in voucher
    verification; the rest is carried through for the HTTP surface.
    """

    pay_to: str
    max_amount_required: UIntLike
    asset: str
    scheme: str = "deferred"
    network: str = ""
    resource: str = ""
    description: str = ""
    mime_type: str = ""
    max_timeout_seconds: int = 0
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeferredSchemeConfig:
    """Immutable verifier configuration, fixed at construction."""

    network: str
    escrow_address: str
    rpc_url: str | None = None
    domain_name: str = DEFAULT_DOMAIN_NAME
    domain_version: str = DEFAULT_DOMAIN_VERSION


def to_uint(value: UIntLike, name: str, max_value: int = UINT256_MAX) -> int:
    """Coerce a wire value to an unsigned int within [0, max_value].

    Accepts ints, ASCII decimal strings and 0x-prefixed hex strings.

    Raises:
        ValueError: If the value is not an integer or is out of range.
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an unsigned integer, got {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        if _HEX_RE.fullmatch(text):
            result = int(text, 16)
        elif _DECIMAL_RE.fullmatch(text):
            result = int(text, 10)
        else:
            raise ValueError(f"{name} must be an unsigned integer, got {value!r}")
    else:
        raise ValueError(f"{name} must be an unsigned integer, got {value!r}")

    if result < 0 or result > max_value:
        raise ValueError(f"{name} out of range: {result}")
    return result


def to_bytes32(value: str, name: str = "id") -> bytes:
    """Decode a 0x-prefixed 32-byte hex string."""
    try:
        raw = bytes.fromhex(value.removeprefix("0x"))
    except (ValueError, AttributeError):
        raise ValueError(f"{name} must be a 32-byte hex string, got {value!r}") from None
    if len(raw) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(raw)}")
    return raw


def same_address(left: str, right: str) -> bool:
    """Case-insensitive address equality."""
    return left.lower() == right.lower()


def generate_voucher_id() -> str:
    """Generate a random bytes32 voucher id as 0x-prefixed hex."""
    return "0x" + secrets.token_hex(32)

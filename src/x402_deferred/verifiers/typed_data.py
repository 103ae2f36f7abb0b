"""EIP-712 signing domain and the Voucher struct schema.

The field order of VOUCHER_TYPE_DEF is part of the signing contract: the
struct hash is computed over the fields in declared order, so reordering it
breaks recovery of every signature produced by real clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_utils import to_checksum_address

from x402_deferred.domain.voucher import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    UINT64_MAX,
    Voucher,
    to_bytes32,
    to_uint,
)

PRIMARY_TYPE = "Voucher"

VOUCHER_TYPE_DEF: tuple[dict[str, str], ...] = (
    {"name": "id", "type": "bytes32"},
    {"name": "buyer", "type": "address"},
    {"name": "seller", "type": "address"},
    {"name": "valueAggregate", "type": "uint256"},
    {"name": "asset", "type": "address"},
    {"name": "timestamp", "type": "uint64"},
    {"name": "nonce", "type": "uint256"},
    {"name": "escrow", "type": "address"},
    {"name": "chainId", "type": "uint256"},
)

VOUCHER_TYPES: dict[str, list[dict[str, str]]] = {
    PRIMARY_TYPE: [dict(entry) for entry in VOUCHER_TYPE_DEF],
}


@dataclass(frozen=True)
class EIP712Domain:
    """Scopes a signature to one escrow deployment on one chain."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


def create_eip712_domain(
    chain_id: int,
    verifying_contract: str,
    domain_name: str | None = None,
    domain_version: str | None = None,
) -> EIP712Domain:
    """Build the escrow signing domain. Empty overrides fall back to defaults."""
    return EIP712Domain(
        name=domain_name or DEFAULT_DOMAIN_NAME,
        version=domain_version or DEFAULT_DOMAIN_VERSION,
        chain_id=chain_id,
        verifying_contract=verifying_contract,
    )


def _to_address(value: str, name: str) -> str:
    try:
        return to_checksum_address(value)
    except (ValueError, TypeError):
        raise ValueError(f"{name} must be a 20-byte hex address, got {value!r}") from None


def build_voucher_message(voucher: Voucher) -> dict[str, Any]:
    """Coerce voucher fields to the exact types of the Voucher struct.

    Addresses come back checksummed.

    Raises:
        ValueError: If a numeric field is not an unsigned integer of the
            declared width, the id is not 32 bytes of hex, or an address
            is not 20 bytes of hex. The message names the field.
    """
    return {
        "id": to_bytes32(voucher.id),
        "buyer": _to_address(voucher.buyer, "buyer"),
        "seller": _to_address(voucher.seller, "seller"),
        "valueAggregate": to_uint(voucher.value_aggregate, "valueAggregate"),
        "asset": _to_address(voucher.asset, "asset"),
        "timestamp": to_uint(voucher.timestamp, "timestamp", max_value=UINT64_MAX),
        "nonce": to_uint(voucher.nonce, "nonce"),
        "escrow": _to_address(voucher.escrow, "escrow"),
        "chainId": to_uint(voucher.chain_id, "chainId"),
    }


def build_typed_data(domain: EIP712Domain, message: dict[str, Any]) -> dict[str, Any]:
    """Assemble the full typed-data document for encoding.

    Addresses are checksummed here; eth_account rejects mixed-case addresses
    whose checksum is wrong, and clients send them in any case.

    Raises:
        ValueError: If an address is not 20 bytes of hex.
    """
    domain_data = domain.to_dict()
    domain_data["verifyingContract"] = to_checksum_address(domain.verifying_contract)

    message_data = dict(message)
    for entry in VOUCHER_TYPE_DEF:
        if entry["type"] == "address":
            message_data[entry["name"]] = to_checksum_address(message_data[entry["name"]])

    return {
        "domain": domain_data,
        "types": VOUCHER_TYPES,
        "primaryType": PRIMARY_TYPE,
        "message": message_data,
    }

"""Minimal ABIs for the deferred escrow contract.

Only the functions this service touches are declared. claimVoucher is
listed so the settlement call shape lives next to the read ABIs; this
package never sends it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eth_utils import to_checksum_address

from x402_deferred.domain.voucher import UINT64_MAX, to_bytes32, to_uint

if TYPE_CHECKING:
    from x402_deferred.domain.voucher import Voucher

VOUCHER_TUPLE_COMPONENTS = [
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

DEFERRED_ESCROW_GET_BALANCE_ABI = [
    {
        "name": "getAvailableBalance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "buyer", "type": "address"},
            {"name": "seller", "type": "address"},
            {"name": "asset", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

DEFERRED_ESCROW_VOUCHER_CLAIMED_ABI = [
    {
        "name": "voucherClaimed",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "voucherId", "type": "bytes32"},
            {"name": "nonce", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

DEFERRED_ESCROW_CLAIM_VOUCHER_ABI = [
    {
        "name": "claimVoucher",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "voucher", "type": "tuple", "components": VOUCHER_TUPLE_COMPONENTS},
            {"name": "signature", "type": "bytes"},
        ],
        "outputs": [],
    },
]

DEFERRED_ESCROW_ABI = [
    *DEFERRED_ESCROW_GET_BALANCE_ABI,
    *DEFERRED_ESCROW_VOUCHER_CLAIMED_ABI,
    *DEFERRED_ESCROW_CLAIM_VOUCHER_ABI,
]


def create_voucher_tuple(voucher: Voucher) -> tuple:
    """Build the claimVoucher `voucher` argument in ABI component order.

    Raises:
        ValueError: If a field cannot be coerced to its ABI type.
    """
    return (
        to_bytes32(voucher.id),
        to_checksum_address(voucher.buyer),
        to_checksum_address(voucher.seller),
        to_uint(voucher.value_aggregate, "valueAggregate"),
        to_checksum_address(voucher.asset),
        to_uint(voucher.timestamp, "timestamp", max_value=UINT64_MAX),
        to_uint(voucher.nonce, "nonce"),
        to_checksum_address(voucher.escrow),
        to_uint(voucher.chain_id, "chainId"),
    )

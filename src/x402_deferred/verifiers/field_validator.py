"""Voucher field validation against the verifier config and requirements.

Pure and synchronous: no network, no state. The pipeline runs it as a
single gate before any ledger read is issued.

Checks (all evaluated, result is their conjunction):
    1. escrow   == configured escrow address (case-insensitive)
    2. chainId  == configured chain id
    3. seller   == requirements.pay_to (case-insensitive)
    4. valueAggregate <= requirements.max_amount_required
    5. asset    == requirements.asset (case-insensitive)

A number that cannot be coerced only raises when no earlier check has
failed. After a mismatch it is recorded as one more failing check, so a
voucher is never reported as a fault when it is already known to be
invalid.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from x402_deferred.domain.voucher import same_address, to_uint

if TYPE_CHECKING:
    from collections.abc import Callable

    from x402_deferred.domain.voucher import PaymentRequirements, Voucher


def _numeric_check(mismatches: list[str], name: str, passes: Callable[[], bool]) -> None:
    try:
        ok = passes()
    except ValueError:
        if not mismatches:
            raise
        ok = False
    if not ok:
        mismatches.append(name)


def find_field_mismatches(
    voucher: Voucher,
    requirements: PaymentRequirements,
    *,
    escrow_address: str,
    chain_id: int,
) -> list[str]:
    """Return the name of every failing check, in check order.

    Raises:
        ValueError: If a numeric field cannot be coerced to an unsigned int
            and every check before it passed.
    """
    mismatches: list[str] = []

    if not same_address(voucher.escrow, escrow_address):
        mismatches.append("escrow")

    _numeric_check(
        mismatches,
        "chainId",
        lambda: to_uint(voucher.chain_id, "chainId") == chain_id,
    )

    if not same_address(voucher.seller, requirements.pay_to):
        mismatches.append("seller")

    _numeric_check(
        mismatches,
        "valueAggregate",
        lambda: to_uint(voucher.value_aggregate, "valueAggregate")
        <= to_uint(requirements.max_amount_required, "maxAmountRequired"),
    )

    if not same_address(voucher.asset, requirements.asset):
        mismatches.append("asset")

    return mismatches


def validate_voucher(
    voucher: Voucher,
    requirements: PaymentRequirements,
    *,
    escrow_address: str,
    chain_id: int,
) -> bool:
    """True when every field check passes."""
    return not find_field_mismatches(
        voucher,
        requirements,
        escrow_address=escrow_address,
        chain_id=chain_id,
    )

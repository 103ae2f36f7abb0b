#!/usr/bin/env python3
"""x402 Deferred Facilitator — Dry-Run Simulation.

Runs buyer/seller scenarios through the real verification pipeline with an
in-memory escrow ledger. No RPC endpoint, no chain, no HTTP server.

    Scenario 1: Happy Path
        - Buyer funds the escrow and signs a voucher for 0.5 USDC
        - Buyer tops the same voucher up to 0.8 USDC (next nonce)
        - Both verify; the seller gets the claimVoucher arguments

    Scenario 2: Over-Limit Voucher
        - Buyer signs a voucher for more than the resource's maxAmountRequired
        - Rejected on fields, the ledger is never queried

    Scenario 3: Tampered Voucher
        - Seller raises valueAggregate on a signed voucher -> signer mismatch
        - A third party signs a voucher in the buyer's name -> signer mismatch
        - Garbage signature -> invalid signature

    Scenario 4: Replay
        - A voucher is verified, claimed on the ledger, then resubmitted

    Scenario 5: Underfunded Escrow
        - Escrow holds less than the voucher value
        - The balance RPC read fails -> treated as an empty escrow

Usage:
    uv run python simulation.py
    uv run python simulation.py --scenario 3
"""

from __future__ import annotations

import argparse
import asyncio
import time
from dataclasses import dataclass, field, replace

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from x402_deferred.logging_config import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

from x402_deferred.domain.results import VerificationResult  # noqa: E402
from x402_deferred.domain.voucher import (  # noqa: E402
    DeferredPayload,
    DeferredSchemeConfig,
    PaymentRequirements,
    Voucher,
    generate_voucher_id,
)
from x402_deferred.infrastructure.escrow_abi import (  # noqa: E402
    VOUCHER_TUPLE_COMPONENTS,
    create_voucher_tuple,
)
from x402_deferred.infrastructure.ledger_gateway import InMemoryLedgerGateway  # noqa: E402
from x402_deferred.verifiers.deferred import DeferredSchemeVerifier  # noqa: E402
from x402_deferred.verifiers.typed_data import (  # noqa: E402
    build_typed_data,
    build_voucher_message,
)

NETWORK = "base-sepolia"
ESCROW = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
USDC = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"


# ---------------------------------------------------------------------------
# Bot Agents
# ---------------------------------------------------------------------------
@dataclass
class BuyerBot:
    """Simulated buyer that signs deferred vouchers with a throwaway key."""

    account: LocalAccount = field(default_factory=Account.create)

    @property
    def address(self) -> str:
        return self.account.address

    def sign(self, verifier: DeferredSchemeVerifier, voucher: Voucher) -> DeferredPayload:
        """Sign `voucher` under the verifier's EIP-712 domain."""
        typed = build_typed_data(verifier.get_eip712_domain(), build_voucher_message(voucher))
        signable = encode_typed_data(
            domain_data=typed["domain"],
            message_types=typed["types"],
            message_data=typed["message"],
        )
        signed = self.account.sign_message(signable)
        signature = "0x" + bytes(signed.signature).hex()
        logger.info(
            "🔵 BUYER: Voucher signed",
            voucher_id=voucher.id[:18] + "...",
            nonce=str(voucher.nonce),
            value_aggregate=str(voucher.value_aggregate),
        )
        return DeferredPayload(voucher=voucher, signature=signature)

    def voucher(
        self,
        seller: str,
        value_aggregate: int,
        *,
        voucher_id: str | None = None,
        nonce: int = 1,
        chain_id: int = 84532,
    ) -> Voucher:
        return Voucher(
            id=voucher_id or generate_voucher_id(),
            buyer=self.address,
            seller=seller,
            value_aggregate=str(value_aggregate),
            asset=USDC,
            timestamp=str(int(time.time())),
            nonce=str(nonce),
            escrow=ESCROW,
            chain_id=str(chain_id),
        )


@dataclass
class SellerBot:
    """Simulated resource server that asks the facilitator to verify vouchers."""

    verifier: DeferredSchemeVerifier
    account: LocalAccount = field(default_factory=Account.create)

    @property
    def address(self) -> str:
        return self.account.address

    def requirements(self, max_amount: int) -> PaymentRequirements:
        return PaymentRequirements(
            pay_to=self.address,
            max_amount_required=str(max_amount),
            asset=USDC,
            network=NETWORK,
            resource="https://api.example.com/premium-data",
            description="Premium market data feed",
            mime_type="application/json",
            max_timeout_seconds=60,
        )

    async def submit(
        self, payload: DeferredPayload, requirements: PaymentRequirements
    ) -> VerificationResult:
        logger.info(
            "🟢 SELLER: Submitting voucher",
            voucher_id=payload.voucher.id[:18] + "...",
            value_aggregate=str(payload.voucher.value_aggregate),
        )
        result = await self.verifier.verify(payload, requirements)
        if result.is_valid:
            logger.info("🟢 SELLER: Voucher ACCEPTED ✅", payer=result.payer)
        else:
            logger.info(
                "🟢 SELLER: Voucher REJECTED ❌",
                outcome=result.outcome.value,
                reason=result.invalid_reason,
            )
        return result


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    """Print a section header."""
    print(f"\n--- {text} ---\n")


def print_result(result: VerificationResult, expect_valid: bool) -> None:
    """Pretty-print a verdict and whether it was the expected one."""
    status_icon = "✅" if result.is_valid else "❌"
    print(f"  {status_icon} Verification: {'VALID' if result.is_valid else 'INVALID'}")
    print(f"  Outcome: {result.outcome.value}")
    if result.invalid_reason:
        print(f"  Reason: {result.invalid_reason}")
    if result.payer:
        print(f"  Payer: {result.payer}")
    if result.is_valid != expect_valid:
        raise SystemExit(f"  💥 Unexpected verdict (expected valid={expect_valid})")


def print_claim(payload: DeferredPayload) -> None:
    """Show the claimVoucher call the seller would send."""
    voucher_tuple = create_voucher_tuple(payload.voucher)
    print("  claimVoucher(")
    for entry, value in zip(VOUCHER_TUPLE_COMPONENTS, voucher_tuple):
        name = entry["name"]
        shown = "0x" + value.hex() if isinstance(value, bytes) else value
        print(f"      {name}: {shown}")
    print(f"    signature: {payload.signature[:20]}...)")


def build_world(balance: int) -> tuple[InMemoryLedgerGateway, BuyerBot, SellerBot]:
    """A fresh in-memory escrow with one funded buyer/seller pair."""
    ledger = InMemoryLedgerGateway()
    verifier = DeferredSchemeVerifier(
        DeferredSchemeConfig(network=NETWORK, escrow_address=ESCROW), ledger=ledger
    )
    buyer = BuyerBot()
    seller = SellerBot(verifier=verifier)
    ledger.set_balance(buyer.address, seller.address, USDC, balance)
    logger.info(
        "🏦 ESCROW: Deposit recorded",
        buyer=buyer.address,
        seller=seller.address,
        amount=str(balance),
    )
    return ledger, buyer, seller


# ===========================================================================
# Scenario 1: Happy Path
# ===========================================================================
async def scenario_1_happy_path() -> None:
    banner("SCENARIO 1: Happy Path — aggregate voucher grows, both verify")

    _, buyer, seller = build_world(balance=1_000_000)
    requirements = seller.requirements(max_amount=1_000_000)

    section("Request 1: voucher for 0.50 USDC")
    first = buyer.sign(seller.verifier, buyer.voucher(seller.address, 500_000))
    print_result(await seller.submit(first, requirements), expect_valid=True)

    section("Request 2: same voucher topped up to 0.80 USDC")
    topped_up = buyer.sign(
        seller.verifier,
        buyer.voucher(seller.address, 800_000, voucher_id=first.voucher.id, nonce=2),
    )
    print_result(await seller.submit(topped_up, requirements), expect_valid=True)

    section("Settlement arguments")
    print_claim(topped_up)


# ===========================================================================
# Scenario 2: Over-Limit Voucher
# ===========================================================================
async def scenario_2_over_limit() -> None:
    banner("SCENARIO 2: Over-Limit Voucher — rejected before the ledger")

    ledger, buyer, seller = build_world(balance=10_000_000)
    requirements = seller.requirements(max_amount=1_000_000)

    section("Voucher for 5.00 USDC against a 1.00 USDC limit")
    payload = buyer.sign(seller.verifier, buyer.voucher(seller.address, 5_000_000))
    print_result(await seller.submit(payload, requirements), expect_valid=False)
    print(f"\n  🛡️  Ledger reads issued: {ledger.claim_queries + ledger.balance_queries}")


# ===========================================================================
# Scenario 3: Tampered Voucher
# ===========================================================================
async def scenario_3_tampered() -> None:
    banner("SCENARIO 3: Tampered Voucher — signatures that do not hold up")

    _, buyer, seller = build_world(balance=1_000_000)
    requirements = seller.requirements(max_amount=1_000_000)
    honest = buyer.sign(seller.verifier, buyer.voucher(seller.address, 100_000))

    section("Attempt 1: seller inflates valueAggregate after signing")
    inflated = DeferredPayload(
        voucher=replace(honest.voucher, value_aggregate="900000"),
        signature=honest.signature,
    )
    print_result(await seller.submit(inflated, requirements), expect_valid=False)

    section("Attempt 2: a stranger signs in the buyer's name")
    impostor = BuyerBot()
    forged = impostor.sign(seller.verifier, buyer.voucher(seller.address, 100_000))
    print_result(await seller.submit(forged, requirements), expect_valid=False)

    section("Attempt 3: garbage signature")
    garbage = DeferredPayload(voucher=honest.voucher, signature="0x" + "00" * 65)
    print_result(await seller.submit(garbage, requirements), expect_valid=False)


# ===========================================================================
# Scenario 4: Replay
# ===========================================================================
async def scenario_4_replay() -> None:
    banner("SCENARIO 4: Replay — a claimed voucher is resubmitted")

    ledger, buyer, seller = build_world(balance=1_000_000)
    requirements = seller.requirements(max_amount=1_000_000)
    payload = buyer.sign(seller.verifier, buyer.voucher(seller.address, 250_000))

    section("First submission")
    print_result(await seller.submit(payload, requirements), expect_valid=True)

    section("Seller claims on-chain")
    ledger.mark_claimed(payload.voucher.id, int(payload.voucher.nonce))
    logger.info("🏦 ESCROW: Voucher claimed", voucher_id=payload.voucher.id[:18] + "...")

    section("Same voucher submitted again")
    print_result(await seller.submit(payload, requirements), expect_valid=False)


# ===========================================================================
# Scenario 5: Underfunded Escrow
# ===========================================================================
async def scenario_5_underfunded() -> None:
    banner("SCENARIO 5: Underfunded Escrow — balance is the final backstop")

    ledger, buyer, seller = build_world(balance=200_000)
    requirements = seller.requirements(max_amount=1_000_000)

    section("Voucher for 0.30 USDC against a 0.20 USDC deposit")
    payload = buyer.sign(seller.verifier, buyer.voucher(seller.address, 300_000))
    print_result(await seller.submit(payload, requirements), expect_valid=False)

    section("Deposit is enough, but the balance read fails")
    ledger.set_balance(buyer.address, seller.address, USDC, 5_000_000)
    ledger.fail_balance_reads = True
    print_result(await seller.submit(payload, requirements), expect_valid=False)

    section("Claim-status read fails, balance read works")
    ledger.fail_balance_reads = False
    ledger.fail_claim_reads = True
    print_result(await seller.submit(payload, requirements), expect_valid=True)


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_happy_path,
    2: scenario_2_over_limit,
    3: scenario_3_tampered,
    4: scenario_4_replay,
    5: scenario_5_underfunded,
}


async def run_all() -> None:
    """Run all scenarios sequentially."""
    print("\n" + "🚀" * 35)
    print("  x402 DEFERRED FACILITATOR — SIMULATION")
    print(f"  Network: {NETWORK}  Escrow: {ESCROW}")
    print("  Mode: DRY-RUN (in-memory ledger)")
    print("🚀" * 35 + "\n")

    for scenario in SCENARIOS.values():
        await scenario()

    print("\n" + "=" * 70)
    print("  ✅ ALL SCENARIOS COMPLETED SUCCESSFULLY")
    print("=" * 70 + "\n")


async def run_scenario(num: int) -> None:
    """Run a specific scenario."""
    if num not in SCENARIOS:
        print(f"Unknown scenario {num}. Available: {', '.join(map(str, SCENARIOS))}")
        return
    await SCENARIOS[num]()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="x402 Deferred Facilitator Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1-5). Default: run all.",
    )
    args = parser.parse_args()

    if args.scenario == 0:
        asyncio.run(run_all())
    else:
        asyncio.run(run_scenario(args.scenario))

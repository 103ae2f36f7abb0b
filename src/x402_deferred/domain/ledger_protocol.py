"""Ledger State Gateway protocol and read-failure policy.

The pipeline depends on this Protocol, never on web3 directly, so tests can
swap in a deterministic fake. A gateway never raises: each read returns a
LedgerRead that is either a value or a recorded failure.

What a failure means is decided here, not in the gateway:

    - claim status:  failure -> treated as NOT claimed (fail-open). The
      balance check still runs afterwards and is the final backstop.
    - balance:       failure -> treated as ZERO (fail-closed). An unreadable
      balance must never look like an abundant one.

The domain layer has ZERO imports from web3 or any transport library.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@dataclass(frozen=True)
class LedgerRead(Generic[T]):
    """Result of one read against escrow state.

    Attributes:
        value: The decoded return value; None when the read failed.
        error: Description of the failure; None when the read succeeded.
    """

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> LedgerRead[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> LedgerRead[T]:
        return cls(error=error or "unknown ledger error")


def resolve_claim_status(read: LedgerRead[bool]) -> bool:
    """Claim status as the pipeline sees it. Failed reads count as unclaimed."""
    if not read.ok:
        return False
    return bool(read.value)


def resolve_available_balance(read: LedgerRead[int]) -> int:
    """Available balance as the pipeline sees it. Failed reads count as zero."""
    if not read.ok or read.value is None:
        return 0
    return int(read.value)


@runtime_checkable
class LedgerStateGateway(Protocol):
    """Read-only view of the deferred escrow contract.

    Concrete implementations:
        - infrastructure/ledger_gateway.py Web3LedgerGateway   (JSON-RPC)
        - infrastructure/ledger_gateway.py InMemoryLedgerGateway (dry-run, tests)
    """

    async def is_voucher_claimed(self, voucher_id: str, nonce: int) -> LedgerRead[bool]:
        """Whether (voucher_id, nonce) has been settled on-chain."""
        ...

    async def get_available_balance(
        self, buyer: str, seller: str, asset: str
    ) -> LedgerRead[int]:
        """Remaining escrow entitlement of buyer toward seller in asset."""
        ...

"""Signature parsing and EIP-712 signer recovery.

recover_signer() never raises on a bad signature: it returns a
SignerRecovery whose `error` says why recovery failed. A voucher field that
cannot be coerced to its struct type (id, address or number) raises
ValueError naming the field, and the pipeline turns that into a structured
fault at its own boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_typed_data

from x402_deferred.domain.voucher import Voucher
from x402_deferred.logging_config import get_logger
from x402_deferred.verifiers.typed_data import (
    EIP712Domain,
    build_typed_data,
    build_voucher_message,
)

logger = get_logger(__name__)

SIGNATURE_LENGTH = 65


@dataclass(frozen=True)
class SignatureParts:
    """A 65-byte signature split as r (32) | s (32) | v (1)."""

    v: int
    r: str
    s: str


@dataclass(frozen=True)
class SignerRecovery:
    """Either a recovered signer address or the reason recovery failed."""

    signer: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.signer is not None


def _signature_bytes(signature: str) -> bytes:
    try:
        raw = bytes.fromhex(signature.removeprefix("0x"))
    except (ValueError, AttributeError):
        raise ValueError("signature is not valid hex") from None
    if len(raw) != SIGNATURE_LENGTH:
        raise ValueError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}")
    return raw


def parse_signature(signature: str) -> SignatureParts:
    """Split a 0x-prefixed 65-byte signature into its v, r, s components.

    Raises:
        ValueError: If the signature is not 65 bytes of hex.
    """
    raw = _signature_bytes(signature)
    return SignatureParts(
        v=raw[64],
        r="0x" + raw[0:32].hex(),
        s="0x" + raw[32:64].hex(),
    )


def normalize_v(v: int) -> int:
    """Map a recovery id onto 27/28. Accepts 0, 1, 27 and 28 only."""
    if v in (0, 1):
        return v + 27
    if v in (27, 28):
        return v
    raise ValueError(f"invalid recovery id v={v}")


def recover_signer(domain: EIP712Domain, voucher: Voucher, signature: str) -> SignerRecovery:
    """Recover the account that signed `voucher` under `domain`.

    Raises:
        ValueError: If a voucher field cannot be coerced to its struct type.
    """
    # Coerced before the try: a malformed field is a fault, not a bad signature
    message = build_voucher_message(voucher)

    try:
        parts = parse_signature(signature)
        v = normalize_v(parts.v)
        typed_data = build_typed_data(domain, message)
        signable = encode_typed_data(
            domain_data=typed_data["domain"],
            message_types=typed_data["types"],
            message_data=typed_data["message"],
        )
        recovered = Account.recover_message(
            signable, vrs=(v, int(parts.r, 16), int(parts.s, 16))
        )
    except Exception as exc:
        logger.debug("verifier.signature.recovery_failed", error=str(exc))
        return SignerRecovery(error=str(exc) or exc.__class__.__name__)

    return SignerRecovery(signer=recovered)

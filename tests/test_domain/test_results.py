"""Tests for VerificationResult and its exception mapping."""

from __future__ import annotations

import pytest

from x402_deferred.domain.enums import VerificationOutcome
from x402_deferred.domain.exceptions import (
    FieldValidationError,
    InsufficientFundsError,
    ReplayError,
    SignatureError,
    VerificationFaultError,
    VoucherRejectedError,
)
from x402_deferred.domain.results import VerificationResult

PAYER = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


class TestConstructors:
    def test_valid_carries_payer(self) -> None:
        result = VerificationResult.valid(payer=PAYER)
        assert result.is_valid is True
        assert result.invalid_reason is None
        assert result.payer == PAYER
        assert result.outcome == VerificationOutcome.VALID

    def test_invalid_never_carries_payer(self) -> None:
        result = VerificationResult.invalid(
            VerificationOutcome.ALREADY_CLAIMED, "Voucher already claimed", recovered_signer=PAYER
        )
        assert result.is_valid is False
        assert result.payer is None
        assert result.recovered_signer == PAYER

    def test_to_dict_uses_x402_names(self) -> None:
        result = VerificationResult.invalid(
            VerificationOutcome.FIELDS_INVALID, "Voucher fields invalid"
        )
        assert result.to_dict() == {
            "isValid": False,
            "invalidReason": "Voucher fields invalid",
            "payer": None,
        }


class TestRaiseForInvalid:
    def test_valid_does_not_raise(self) -> None:
        VerificationResult.valid(payer=PAYER).raise_for_invalid()

    @pytest.mark.parametrize(
        ("outcome", "exc_class"),
        [
            (VerificationOutcome.FIELDS_INVALID, FieldValidationError),
            (VerificationOutcome.INVALID_SIGNATURE, SignatureError),
            (VerificationOutcome.SIGNER_MISMATCH, SignatureError),
            (VerificationOutcome.ALREADY_CLAIMED, ReplayError),
            (VerificationOutcome.INSUFFICIENT_BALANCE, InsufficientFundsError),
            (VerificationOutcome.VERIFICATION_FAULT, VerificationFaultError),
            (VerificationOutcome.UNSUPPORTED_PAYMENT, FieldValidationError),
        ],
    )
    def test_outcome_maps_to_exception(
        self, outcome: VerificationOutcome, exc_class: type[VoucherRejectedError]
    ) -> None:
        result = VerificationResult.invalid(outcome, "reason text")
        with pytest.raises(exc_class) as exc_info:
            result.raise_for_invalid()
        assert exc_info.value.message == "reason text"

    def test_signer_mismatch_keeps_recovered_address(self) -> None:
        result = VerificationResult.invalid(
            VerificationOutcome.SIGNER_MISMATCH,
            "Signer does not match buyer",
            recovered_signer=PAYER,
        )
        with pytest.raises(SignatureError) as exc_info:
            result.raise_for_invalid()
        assert exc_info.value.recovered == PAYER
        assert exc_info.value.code == "INVALID_SIGNATURE"

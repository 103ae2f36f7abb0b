"""Domain layer — vouchers, results and the ledger protocol, no web3 imports."""

from x402_deferred.domain.enums import PaymentScheme, VerificationOutcome
from x402_deferred.domain.exceptions import (
    ConfigurationError,
    DeferredSchemeError,
    FieldValidationError,
    InsufficientFundsError,
    LedgerQueryError,
    ReplayError,
    SignatureError,
    UnsupportedNetworkError,
    VerificationFaultError,
    VoucherRejectedError,
)
from x402_deferred.domain.ledger_protocol import (
    LedgerRead,
    LedgerStateGateway,
    resolve_available_balance,
    resolve_claim_status,
)
from x402_deferred.domain.results import VerificationResult
from x402_deferred.domain.voucher import (
    DeferredPayload,
    DeferredSchemeConfig,
    PaymentRequirements,
    Voucher,
    generate_voucher_id,
)

__all__ = [
    "PaymentScheme",
    "VerificationOutcome",
    "ConfigurationError",
    "DeferredSchemeError",
    "FieldValidationError",
    "InsufficientFundsError",
    "LedgerQueryError",
    "ReplayError",
    "SignatureError",
    "UnsupportedNetworkError",
    "VerificationFaultError",
    "VoucherRejectedError",
    "LedgerRead",
    "LedgerStateGateway",
    "resolve_available_balance",
    "resolve_claim_status",
    "VerificationResult",
    "DeferredPayload",
    "DeferredSchemeConfig",
    "PaymentRequirements",
    "Voucher",
    "generate_voucher_id",
]

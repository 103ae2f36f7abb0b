"""Domain exceptions for the deferred-scheme facilitator.

The verification pipeline itself never raises these: it always returns a
VerificationResult. They exist for two reasons:

    - ConfigurationError is raised when a verifier is constructed against a
      network that cannot be resolved. A verifier without a chain is unusable.
    - Callers that prefer exceptions (e.g. a settlement step that must not
      run on an invalid voucher) call VerificationResult.raise_for_invalid(),
      which maps each outcome onto one of the classes below.

The API middleware translates them into structured JSON error responses.
"""


class DeferredSchemeError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DEFERRED_SCHEME_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Configuration Errors ---


class ConfigurationError(DeferredSchemeError):
    """Raised when the verifier cannot be built from its configuration."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR") -> None:
        super().__init__(message=message, code=code)


class UnsupportedNetworkError(ConfigurationError):
    """Raised when a network name has no known chain id or RPC endpoint."""

    def __init__(self, network: str) -> None:
        super().__init__(
            message=f"Unsupported network: {network}",
            code="UNSUPPORTED_NETWORK",
        )
        self.network = network


# --- Voucher Rejections ---


class VoucherRejectedError(DeferredSchemeError):
    """Base exception for a voucher that failed verification."""

    def __init__(self, message: str, code: str = "VOUCHER_REJECTED") -> None:
        super().__init__(message=message, code=code)


class FieldValidationError(VoucherRejectedError):
    """Voucher fields disagree with the verifier config or the requirements."""

    def __init__(self, message: str = "Voucher fields invalid") -> None:
        super().__init__(message=message, code="FIELDS_INVALID")


class SignatureError(VoucherRejectedError):
    """Malformed signature, failed recovery, or signer is not the buyer."""

    def __init__(self, message: str = "Invalid signature", recovered: str | None = None) -> None:
        super().__init__(message=message, code="INVALID_SIGNATURE")
        self.recovered = recovered


class ReplayError(VoucherRejectedError):
    """The (voucher id, nonce) pair has already been claimed on-chain."""

    def __init__(self, message: str = "Voucher already claimed") -> None:
        super().__init__(message=message, code="ALREADY_CLAIMED")


class InsufficientFundsError(VoucherRejectedError):
    """Available escrow balance is below the voucher's aggregate value.

    Unlike the other rejections this one may clear on its own once the
    buyer tops up the escrow, so a later retry is legitimate.
    """

    def __init__(self, message: str = "Insufficient escrow balance") -> None:
        super().__init__(message=message, code="INSUFFICIENT_BALANCE")


class VerificationFaultError(VoucherRejectedError):
    """An unexpected fault (e.g. malformed numeric field) stopped verification."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VERIFICATION_FAULT")


# --- Ledger Errors ---


class LedgerQueryError(DeferredSchemeError):
    """A read against the escrow contract failed.

    Raised and absorbed inside the ledger gateway; it never reaches the
    pipeline. See domain/ledger_protocol.py for the degradation policy.
    """

    def __init__(self, function_name: str, reason: str) -> None:
        super().__init__(
            message=f"Ledger read {function_name} failed: {reason}",
            code="LEDGER_QUERY_ERROR",
        )
        self.function_name = function_name
        self.reason = reason

"""Deferred-scheme voucher verification.

Pieces, leaves first:
    - typed_data:       EIP-712 domain and the Voucher struct schema
    - signature:        signature parsing and signer recovery
    - field_validator:  pure field checks against config and requirements
    - deferred:         DeferredSchemeVerifier, the ordered pipeline
"""

from x402_deferred.verifiers.deferred import DeferredSchemeVerifier
from x402_deferred.verifiers.field_validator import find_field_mismatches, validate_voucher
from x402_deferred.verifiers.signature import (
    SignatureParts,
    SignerRecovery,
    parse_signature,
    recover_signer,
)
from x402_deferred.verifiers.typed_data import (
    VOUCHER_TYPE_DEF,
    VOUCHER_TYPES,
    EIP712Domain,
    build_typed_data,
    build_voucher_message,
    create_eip712_domain,
)

__all__ = [
    "DeferredSchemeVerifier",
    "find_field_mismatches",
    "validate_voucher",
    "SignatureParts",
    "SignerRecovery",
    "parse_signature",
    "recover_signer",
    "VOUCHER_TYPE_DEF",
    "VOUCHER_TYPES",
    "EIP712Domain",
    "build_typed_data",
    "build_voucher_message",
    "create_eip712_domain",
]

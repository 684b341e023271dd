"""
Error Classification

Defines the error types raised by the UserOperation core.

Every error here describes malformed input and is diagnosable from the input
alone. Verification mismatches (wrong signer, expired window) are never
raised; they are reported as booleans on ``ValidationResult``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Categories of malformed input."""

    MALFORMED_HEX = "malformed_hex"                  # Not 0x-prefixed even-length hex
    OVERFLOW = "overflow"                            # Value wider than its slot
    FIELD_TOO_LARGE = "field_too_large"              # Integer exceeds declared bit width
    INVALID_FIELD = "invalid_field"                  # Wrong length / type for a field
    UNSUPPORTED_VERSION = "unsupported_version"      # Neither v0.6 nor v0.7
    INVALID_SIGNATURE_LENGTH = "invalid_signature_length"
    INVALID_RECOVERY_ID = "invalid_recovery_id"
    TRUNCATED_PAYMASTER_DATA = "truncated_paymaster_data"


class MalformedInputError(ValueError):
    """
    Base class for input that cannot be encoded, hashed or verified.

    These errors are deterministic: retrying with the same input always fails
    the same way, so callers should reject the input outright.
    """

    kind: ErrorKind = ErrorKind.INVALID_FIELD

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {
            "code": self.kind.value,
            "message": self.message,
            "field": self.field,
        }


class MalformedHexError(MalformedInputError):
    """Value is not 0x-prefixed hex of even length."""

    kind = ErrorKind.MALFORMED_HEX


class ValueOverflowError(MalformedInputError):
    """Byte string or integer does not fit its fixed-width slot."""

    kind = ErrorKind.OVERFLOW


class FieldTooLargeError(ValueOverflowError):
    """Integer field exceeds its declared bit width."""

    kind = ErrorKind.FIELD_TOO_LARGE


class InvalidFieldError(MalformedInputError):
    """Field has the wrong shape for its slot."""

    kind = ErrorKind.INVALID_FIELD


class UnsupportedVersionError(MalformedInputError):
    """EntryPoint version tag is not recognised."""

    kind = ErrorKind.UNSUPPORTED_VERSION

    def __init__(self, version: object):
        super().__init__(f"Unsupported EntryPoint version: {version!r}", field="version")
        self.version = version


class InvalidSignatureLengthError(MalformedInputError):
    """Signature is not exactly 65 bytes."""

    kind = ErrorKind.INVALID_SIGNATURE_LENGTH

    def __init__(self, length: int, field: Optional[str] = "signature"):
        super().__init__(f"Signature must be 65 bytes, got {length}", field=field)
        self.length = length


class InvalidRecoveryIdError(MalformedInputError):
    """Signature v byte is outside {27, 28} (or the {0, 1} alias)."""

    kind = ErrorKind.INVALID_RECOVERY_ID

    def __init__(self, v: int, field: Optional[str] = "signature"):
        super().__init__(f"Invalid recovery id v={v}, expected 27 or 28", field=field)
        self.v = v


class TruncatedPaymasterDataError(MalformedInputError):
    """Non-empty paymasterAndData shorter than the packed layout."""

    kind = ErrorKind.TRUNCATED_PAYMASTER_DATA

    def __init__(self, length: int, expected: int):
        super().__init__(
            f"paymasterAndData is {length} bytes, expected {expected}",
            field="paymasterAndData",
        )
        self.length = length
        self.expected = expected


class SignatureRecoveryError(Exception):
    """
    A well-formed signature that does not recover to any public key.

    Raised by ``recover_signer``; the validator reports it as a mismatch.
    """

"""
UserOperation Signing Core

Canonical hashing, signing and validation for ERC-4337 UserOperations:
- UserOperationV06 / UserOperationV07: the two EntryPoint struct layouts
- compute_user_op_hash: versioned, domain-separated userOpHash
- sign_hash / recover_signer: personal-message ECDSA over a hash
- canonicalize: low-S signature normalization
- encode_paymaster_data / paymaster_sign_hash: sponsor authorization
- validate_user_operation: recover-and-compare checks

Usage:
    from anode.core.userop import (
        EntryPointVersion,
        UserOperationV06,
        compute_user_op_hash,
        sign_hash,
    )

    op_hash = compute_user_op_hash(op, entry_point, chain_id, EntryPointVersion.V06)
    op.signature = to_hex(sign_hash(op_hash, signer))
"""

from .canonical import (
    SECP256K1_HALF_N,
    SECP256K1_N,
    canonicalize,
    is_canonical,
)

from .codec import (
    concat,
    encode_uint,
    encode_word,
    keccak,
    parse_address,
    parse_hex,
    to_fixed_width,
    to_hex,
)

from .constants import (
    ENTRYPOINT_ADDRESSES,
    SEPOLIA_CHAIN_ID,
    ZERO_ADDRESS,
    default_entry_point,
)

from .errors import (
    ErrorKind,
    FieldTooLargeError,
    InvalidFieldError,
    InvalidRecoveryIdError,
    InvalidSignatureLengthError,
    MalformedHexError,
    MalformedInputError,
    SignatureRecoveryError,
    TruncatedPaymasterDataError,
    UnsupportedVersionError,
    ValueOverflowError,
)

from .hashing import (
    compute_sponsor_op_hash,
    compute_struct_hash,
    compute_user_op_hash,
)

from .models import (
    EntryPointVersion,
    GasFields,
    UserOperation,
    UserOperationV06,
    UserOperationV07,
    convert_v06_to_v07,
    convert_v07_to_v06,
    normalize_gas_fields,
    pack_uint128_pair,
    unpack_uint128_pair,
    user_operation_from_rpc,
    version_of,
)

from .paymaster_data import (
    PAYMASTER_DATA_LENGTH,
    UINT48_MAX,
    PaymasterData,
    decode_paymaster_data,
    encode_paymaster_data,
    paymaster_sign_hash,
)

from .signer import (
    PERSONAL_MESSAGE_PREFIX,
    KeySigner,
    LocalKeySigner,
    address_of,
    join_signature,
    personal_message_digest,
    recover_signer,
    sign_hash,
    split_signature,
)

from .sponsor import (
    PaymasterSponsor,
    PaymentMethod,
    SponsorResult,
    SponsorshipPolicy,
    attach_paymaster_data,
    attach_signature,
    detect_payment_method,
    max_gas_cost,
)

from .validator import (
    ValidationResult,
    validate_user_operation,
)

__all__ = [
    # Canonical signatures
    "SECP256K1_N",
    "SECP256K1_HALF_N",
    "canonicalize",
    "is_canonical",
    # Byte codec
    "concat",
    "encode_uint",
    "encode_word",
    "keccak",
    "parse_address",
    "parse_hex",
    "to_fixed_width",
    "to_hex",
    # Constants
    "ENTRYPOINT_ADDRESSES",
    "SEPOLIA_CHAIN_ID",
    "ZERO_ADDRESS",
    "default_entry_point",
    # Errors
    "ErrorKind",
    "MalformedInputError",
    "MalformedHexError",
    "ValueOverflowError",
    "FieldTooLargeError",
    "InvalidFieldError",
    "UnsupportedVersionError",
    "InvalidSignatureLengthError",
    "InvalidRecoveryIdError",
    "TruncatedPaymasterDataError",
    "SignatureRecoveryError",
    # Hashing
    "compute_struct_hash",
    "compute_user_op_hash",
    "compute_sponsor_op_hash",
    # Models
    "EntryPointVersion",
    "GasFields",
    "UserOperation",
    "UserOperationV06",
    "UserOperationV07",
    "convert_v06_to_v07",
    "convert_v07_to_v06",
    "normalize_gas_fields",
    "pack_uint128_pair",
    "unpack_uint128_pair",
    "user_operation_from_rpc",
    "version_of",
    # Paymaster data
    "PAYMASTER_DATA_LENGTH",
    "UINT48_MAX",
    "PaymasterData",
    "decode_paymaster_data",
    "encode_paymaster_data",
    "paymaster_sign_hash",
    # Signer
    "PERSONAL_MESSAGE_PREFIX",
    "KeySigner",
    "LocalKeySigner",
    "address_of",
    "join_signature",
    "personal_message_digest",
    "recover_signer",
    "sign_hash",
    "split_signature",
    # Sponsorship
    "PaymasterSponsor",
    "PaymentMethod",
    "SponsorResult",
    "SponsorshipPolicy",
    "attach_paymaster_data",
    "attach_signature",
    "detect_payment_method",
    "max_gas_cost",
    # Validation
    "ValidationResult",
    "validate_user_operation",
]

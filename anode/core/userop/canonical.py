"""
Low-S signature canonicalization.

ECDSA accepts both ``(r, s)`` and ``(r, N - s)``; strict verifiers only
accept the form with ``s <= N / 2``.
"""

from __future__ import annotations

from .errors import InvalidRecoveryIdError, InvalidSignatureLengthError

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SIGNATURE_LENGTH = 65

_FLIPPED_V = {27: 28, 28: 27, 0: 1, 1: 0}


def _check_length(signature: bytes) -> None:
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(signature))


def is_canonical(signature: bytes) -> bool:
    _check_length(signature)
    return int.from_bytes(signature[32:64], "big") <= SECP256K1_HALF_N


def canonicalize(signature: bytes) -> bytes:
    """
    Return the low-S form of ``signature``.

    High-S input gets ``s' = N - s`` and the opposite recovery id; ``r`` is
    kept. Low-S input is returned unchanged, so the function is idempotent.
    """
    signature = bytes(signature)
    _check_length(signature)

    v = signature[64]
    if v not in _FLIPPED_V:
        raise InvalidRecoveryIdError(v)

    s = int.from_bytes(signature[32:64], "big")
    if s <= SECP256K1_HALF_N:
        return signature

    return signature[:32] + (SECP256K1_N - s).to_bytes(32, "big") + bytes([_FLIPPED_V[v]])

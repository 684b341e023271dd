"""
Personal-message signing and recovery for userOpHash values.

Accounts and paymasters verify with
``ECDSA.recover(toEthSignedMessageHash(hash), signature)``, so every hash is
wrapped as

    digest = keccak("\\x19Ethereum Signed Message:\\n32" ‖ hash)

before signing. Signing the raw hash or an EIP-712 digest does not verify.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple, Union

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .canonical import SIGNATURE_LENGTH, canonicalize
from .codec import HexOrBytes, as_bytes, concat, keccak
from .errors import (
    InvalidFieldError,
    InvalidRecoveryIdError,
    InvalidSignatureLengthError,
    SignatureRecoveryError,
)

PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n32"

HASH_LENGTH = 32


class KeySigner(ABC):
    """
    Signing capability over 32-byte digests.

    Implementations wrap whatever holds the key (local key, KMS, HSM) and
    never expose key material.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing key"""
        pass

    @abstractmethod
    def sign_digest(self, digest: bytes) -> bytes:
        """Return a 65-byte ``r ‖ s ‖ v`` signature over ``digest`` (v in {0,1} or {27,28})"""
        pass


class LocalKeySigner(KeySigner):
    """In-process signer backed by a raw secp256k1 private key."""

    def __init__(self, private_key: Union[str, bytes]) -> None:
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_digest(self, digest: bytes) -> bytes:
        signature = keys.PrivateKey(bytes(self._account.key)).sign_msg_hash(bytes(digest))
        return signature.to_bytes()

    def __repr__(self) -> str:
        return f"LocalKeySigner(address={self.address})"


def address_of(private_key: Union[str, bytes]) -> str:
    return Account.from_key(private_key).address


def _hash_bytes(message_hash: HexOrBytes) -> bytes:
    raw = as_bytes(message_hash, "hash")
    if len(raw) != HASH_LENGTH:
        raise InvalidFieldError(f"hash must be {HASH_LENGTH} bytes, got {len(raw)}", field="hash")
    return raw


def personal_message_digest(message_hash: HexOrBytes) -> bytes:
    return keccak(concat(PERSONAL_MESSAGE_PREFIX, _hash_bytes(message_hash)))


def split_signature(signature: HexOrBytes) -> Tuple[int, int, int]:
    """Split a 65-byte signature into ``(r, s, v)``."""
    raw = as_bytes(signature, "signature")
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(raw))
    return (
        int.from_bytes(raw[:32], "big"),
        int.from_bytes(raw[32:64], "big"),
        raw[64],
    )


def join_signature(r: int, s: int, v: int) -> bytes:
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v])


def _normalize_v(v: int) -> int:
    if v in (0, 1):
        return v + 27
    if v not in (27, 28):
        raise InvalidRecoveryIdError(v)
    return v


def sign_hash(message_hash: HexOrBytes, key: Union[KeySigner, str, bytes]) -> bytes:
    """
    Sign ``message_hash`` with the personal-message prefix.

    Args:
        message_hash: 32-byte hash (e.g. a userOpHash).
        key: A ``KeySigner`` capability, or a raw private key which is wrapped
            for the duration of this call only.

    Returns:
        65-byte canonical (low-S) ``r ‖ s ‖ v`` with ``v`` in {27, 28}.
    """
    signer = key if isinstance(key, KeySigner) else LocalKeySigner(key)
    raw = bytes(signer.sign_digest(personal_message_digest(message_hash)))
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(raw))
    return canonicalize(raw[:64] + bytes([_normalize_v(raw[64])]))


def recover_signer(message_hash: HexOrBytes, signature: HexOrBytes) -> str:
    """
    Recover the checksummed address that produced ``signature`` over
    ``message_hash`` (personal-message wrapped).

    Raises:
        InvalidSignatureLengthError: signature is not 65 bytes.
        InvalidRecoveryIdError: ``v`` not in {27, 28} (or {0, 1}).
        SignatureRecoveryError: no public key recovers from ``(r, s)``.
    """
    r, s, v = split_signature(signature)
    recovery_id = _normalize_v(v) - 27
    digest = personal_message_digest(message_hash)

    try:
        public_key = keys.Signature(vrs=(recovery_id, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as exc:
        raise SignatureRecoveryError(str(exc)) from exc

    return public_key.to_checksum_address()

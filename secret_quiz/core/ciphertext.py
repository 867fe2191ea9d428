"""Ciphertext handle types and the encryption-layer interfaces the core consumes.

Architecture note:
    The core never sees plaintext. It receives opaque handles from participants,
    asks the gateway to validate them, and combines them with the homomorphic
    operators below. Both interfaces are protocols so that the real encryption
    runtime and the in-process mock can be swapped without touching the services.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class CiphertextKind(str, Enum):
    EUINT64 = "euint64"
    EBOOL = "ebool"


@dataclass(frozen=True, slots=True)
class Ciphertext:
    """Opaque reference to an encrypted value held by the encryption runtime."""

    handle: bytes
    kind: CiphertextKind = CiphertextKind.EUINT64

    def hex(self) -> str:
        return "0x" + self.handle.hex()

    @classmethod
    def from_hex(cls, value: str, kind: CiphertextKind = CiphertextKind.EUINT64) -> "Ciphertext":
        return cls(handle=decode_hex(value), kind=kind)


def decode_hex(value: str) -> bytes:
    """Decode an optionally ``0x``-prefixed hex string into bytes."""
    text = value[2:] if value[:2].lower() == "0x" else value
    return bytes.fromhex(text)


class CiphertextGateway(Protocol):
    """Validates participant-supplied ciphertexts and manages decryption grants."""

    def verify_and_import(self, handle: bytes, proof: bytes, caller: str) -> Ciphertext:
        """Return a usable ciphertext or raise ``InvalidProof``."""
        ...

    def grant_decrypt_access(self, ciphertext: Ciphertext, account: str) -> None:
        """Allow ``account`` to request decryption of ``ciphertext``. Idempotent."""
        ...


class HomomorphicOps(Protocol):
    """Operators that combine ciphertexts without revealing their plaintexts."""

    def encrypt_constant(self, value: int) -> Ciphertext:
        ...

    def eq(self, left: Ciphertext, right: Ciphertext) -> Ciphertext:
        ...

    def select(self, condition: Ciphertext, if_true: Ciphertext, if_false: Ciphertext) -> Ciphertext:
        ...

    def add(self, left: Ciphertext, right: Ciphertext) -> Ciphertext:
        ...

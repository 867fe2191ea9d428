"""In-process stand-in for the external homomorphic encryption runtime.

The mock keeps plaintexts in a private vault keyed by random handles, so code
on the core side only ever holds opaque ``Ciphertext`` values, exactly as it
would against the real runtime. It plays both roles the real system splits
between two parties:

* the participant's client runtime (``encrypt_uint64`` and ``user_decrypt``),
  which the core never calls;
* the on-chain gateway and operator set (``verify_and_import``,
  ``grant_decrypt_access`` and the ``HomomorphicOps`` methods).

Input proofs are HMAC-SHA256 tags over handle, account and contract address.
A proof produced for one account does not validate when another account
imports the handle, mirroring the caller binding of real input proofs.
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import hmac
import logging
import secrets
from threading import Lock

from secret_quiz.constants.quiz_constants import UINT64_MAX
from secret_quiz.core.ciphertext import Ciphertext, CiphertextKind
from secret_quiz.core.errors import InvalidProof

logger = logging.getLogger(__name__)

_HANDLE_SIZE = 32
DEFAULT_CONTRACT_ADDRESS = "0x0000000000000000000000000000000000005ec1"


class DecryptionNotAllowed(PermissionError):
    """Raised when an account asks to decrypt a handle it was never granted."""


@dataclass(frozen=True, slots=True)
class EncryptedInput:
    """Client-side encryption result: the handle to submit plus its input proof."""

    handle: bytes
    proof: bytes


class MockFheRuntime:
    """Vault-backed implementation of ``CiphertextGateway`` and ``HomomorphicOps``."""

    def __init__(self, contract_address: str = DEFAULT_CONTRACT_ADDRESS, secret_key: bytes | None = None) -> None:
        self._lock = Lock()
        self._contract_address = contract_address.lower()
        self._key = secret_key or secrets.token_bytes(32)
        self._vault: dict[bytes, tuple[CiphertextKind, int]] = {}
        self._grants: dict[bytes, set[str]] = {}

    @property
    def contract_address(self) -> str:
        return self._contract_address

    # --- Client side ---

    def encrypt_uint64(self, value: int, account: str) -> EncryptedInput:
        """Encrypt ``value`` for submission by ``account``."""
        if not isinstance(value, int) or not 0 <= value <= UINT64_MAX:
            raise ValueError("Value must be an unsigned 64-bit integer.")
        with self._lock:
            handle = self._store(CiphertextKind.EUINT64, value)
        return EncryptedInput(handle=handle, proof=self._sign(handle, account))

    def user_decrypt(self, ciphertext: Ciphertext, account: str) -> int:
        """Decrypt a handle on behalf of ``account``; requires a prior grant."""
        with self._lock:
            if account.lower() not in self._grants.get(ciphertext.handle, set()):
                raise DecryptionNotAllowed(
                    f"Account {account} is not allowed to decrypt {ciphertext.hex()}"
                )
            _, value = self._lookup(ciphertext)
            return value

    def has_access(self, ciphertext: Ciphertext, account: str) -> bool:
        with self._lock:
            return account.lower() in self._grants.get(ciphertext.handle, set())

    # --- Gateway ---

    def verify_and_import(self, handle: bytes, proof: bytes, caller: str) -> Ciphertext:
        expected = self._sign(handle, caller)
        if not hmac.compare_digest(expected, proof):
            raise InvalidProof("Input proof does not match the handle, caller and contract")
        with self._lock:
            entry = self._vault.get(handle)
        if entry is None:
            raise InvalidProof("Unknown ciphertext handle")
        return Ciphertext(handle=handle, kind=entry[0])

    def grant_decrypt_access(self, ciphertext: Ciphertext, account: str) -> None:
        with self._lock:
            self._lookup(ciphertext)
            self._grants.setdefault(ciphertext.handle, set()).add(account.lower())
        logger.debug("Granted %s decryption of %s", account, ciphertext.hex())

    # --- Homomorphic operators ---

    def encrypt_constant(self, value: int) -> Ciphertext:
        if not 0 <= value <= UINT64_MAX:
            raise ValueError("Value must be an unsigned 64-bit integer.")
        with self._lock:
            return Ciphertext(self._store(CiphertextKind.EUINT64, value), CiphertextKind.EUINT64)

    def eq(self, left: Ciphertext, right: Ciphertext) -> Ciphertext:
        with self._lock:
            _, a = self._lookup(left, CiphertextKind.EUINT64)
            _, b = self._lookup(right, CiphertextKind.EUINT64)
            return Ciphertext(self._store(CiphertextKind.EBOOL, int(a == b)), CiphertextKind.EBOOL)

    def select(self, condition: Ciphertext, if_true: Ciphertext, if_false: Ciphertext) -> Ciphertext:
        with self._lock:
            _, flag = self._lookup(condition, CiphertextKind.EBOOL)
            _, a = self._lookup(if_true, CiphertextKind.EUINT64)
            _, b = self._lookup(if_false, CiphertextKind.EUINT64)
            return Ciphertext(self._store(CiphertextKind.EUINT64, a if flag else b), CiphertextKind.EUINT64)

    def add(self, left: Ciphertext, right: Ciphertext) -> Ciphertext:
        with self._lock:
            _, a = self._lookup(left, CiphertextKind.EUINT64)
            _, b = self._lookup(right, CiphertextKind.EUINT64)
            total = (a + b) & UINT64_MAX
            return Ciphertext(self._store(CiphertextKind.EUINT64, total), CiphertextKind.EUINT64)

    # --- Internals (caller holds the lock) ---

    def _store(self, kind: CiphertextKind, value: int) -> bytes:
        handle = secrets.token_bytes(_HANDLE_SIZE)
        while handle in self._vault:
            handle = secrets.token_bytes(_HANDLE_SIZE)
        self._vault[handle] = (kind, value)
        return handle

    def _lookup(self, ciphertext: Ciphertext, kind: CiphertextKind | None = None) -> tuple[CiphertextKind, int]:
        entry = self._vault.get(ciphertext.handle)
        if entry is None:
            raise ValueError(f"Unknown ciphertext handle {ciphertext.hex()}")
        if kind is not None and entry[0] is not kind:
            raise TypeError(f"Expected {kind.value} ciphertext, got {entry[0].value}")
        return entry

    def _sign(self, handle: bytes, account: str) -> bytes:
        message = b"|".join([handle, account.lower().encode("utf-8"), self._contract_address.encode("utf-8")])
        return hmac.new(self._key, message, hashlib.sha256).digest()

"""
Skill Store — Encryption Capability
=====================================

The store only needs two things from an encryption scheme: turn a
plaintext payload into an opaque ciphertext string, and test a predicate
against a ciphertext. A confidential-computation backend can implement
``Cipher`` without the store changing.

``PlaceholderCipher`` is a reversible encoding ("FHE-" + base64 JSON), kept
for compatibility with records already on the ledger. It hides nothing.
"""

from __future__ import annotations

import base64
import json
from abc import ABC, abstractmethod
from typing import Any, Callable

from skill_store.errors import EncryptionError

Predicate = Callable[[dict[str, Any]], bool]


class Cipher(ABC):
    """Encryption capability used by the record store."""

    @abstractmethod
    def encrypt(self, plaintext: dict[str, Any]) -> str:
        pass

    @abstractmethod
    def matches(self, ciphertext: str, predicate: Predicate) -> bool:
        pass


class PlaceholderCipher(Cipher):
    """Reversible stand-in for homomorphic encryption. Not a security boundary."""

    PREFIX = "FHE-"

    def encrypt(self, plaintext: dict[str, Any]) -> str:
        try:
            encoded = json.dumps(plaintext, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Payload is not serializable: {exc}") from exc
        return self.PREFIX + base64.b64encode(encoded).decode("ascii")

    def decrypt(self, ciphertext: str) -> dict[str, Any]:
        if not ciphertext.startswith(self.PREFIX):
            raise EncryptionError("Ciphertext was not produced by this cipher")
        try:
            plaintext = json.loads(base64.b64decode(ciphertext[len(self.PREFIX):], validate=True))
        except ValueError as exc:
            raise EncryptionError(f"Ciphertext is malformed: {exc}") from exc
        if not isinstance(plaintext, dict):
            raise EncryptionError("Ciphertext does not hold an object")
        return plaintext

    def matches(self, ciphertext: str, predicate: Predicate) -> bool:
        return bool(predicate(self.decrypt(ciphertext)))

"""
Skill Store — Error Taxonomy
==============================

Store-level failures. Ledger failures are re-exported so callers can
import the whole taxonomy from one place.
"""

from __future__ import annotations

from ledger_client.errors import (
    AuthorizationError,
    LedgerError,
    LedgerReadError,
    LedgerUnavailable,
    LedgerWriteError,
    NoSigner,
    SkillGraphError,
    UserRejected,
)


class StoreError(SkillGraphError):
    """Raised when a record store operation fails."""


class EncryptionError(StoreError):
    """Raised when the encryption capability cannot process a payload."""


class RecordNotFound(StoreError):
    """Raised when a record key holds no data."""


class RecordCorrupted(StoreError):
    """Raised when a stored record cannot be parsed."""


class IndexCorrupted(StoreError):
    """Raised when the index payload is not a JSON array of strings."""


class InvalidTransition(StoreError):
    """Raised when a status change is not allowed from the current status."""


class InvalidRecord(StoreError):
    """Raised when create() is called with unusable field values."""


class NotOwner(StoreError):
    """Raised when an identity acts on a record it does not own."""


__all__ = [
    "SkillGraphError",
    "LedgerError",
    "LedgerUnavailable",
    "LedgerReadError",
    "LedgerWriteError",
    "AuthorizationError",
    "NoSigner",
    "UserRejected",
    "StoreError",
    "EncryptionError",
    "RecordNotFound",
    "RecordCorrupted",
    "IndexCorrupted",
    "InvalidTransition",
    "InvalidRecord",
    "NotOwner",
]

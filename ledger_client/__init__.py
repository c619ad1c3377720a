"""Ledger Client — Package."""

from ledger_client.client import LedgerClient
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
from ledger_client.models import Receipt, Signer

__all__ = [
    "LedgerClient",
    "Receipt",
    "Signer",
    "SkillGraphError",
    "LedgerError",
    "LedgerUnavailable",
    "LedgerReadError",
    "LedgerWriteError",
    "AuthorizationError",
    "NoSigner",
    "UserRejected",
]

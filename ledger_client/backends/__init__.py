"""Ledger backends."""

from ledger_client.backends.base import LedgerBackend
from ledger_client.backends.memory import InMemoryLedger, LocalFileLedger

__all__ = ["LedgerBackend", "InMemoryLedger", "LocalFileLedger"]

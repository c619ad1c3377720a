"""
Ledger Backends — Abstract Base
=================================

The primitive every ledger must offer: per-key get/set, plus a readiness
probe. Nothing here is transactional across keys.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ledger_client.models import Receipt, Signer


class LedgerBackend(ABC):
    """Abstract base for all ledger implementations."""

    name: str = "ledger"

    @abstractmethod
    async def is_ready(self) -> bool:
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the stored bytes, or ``b""`` when the key was never set."""

    @abstractmethod
    async def set(self, key: str, value: bytes, signer: Signer) -> Receipt:
        pass

    async def list_keys(self, prefix: str = "") -> list[str]:
        """Enumerate stored keys. Optional; most ledgers cannot do this."""
        raise NotImplementedError(f"The {self.name} ledger cannot enumerate keys")

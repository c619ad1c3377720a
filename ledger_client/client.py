"""
Ledger Client — Read-Only and Signer-Bound Access
===================================================

Narrow facade over a LedgerBackend. Callers never see provider errors:
every failure is mapped onto the ledger error taxonomy, and every backend
call is bounded by a timeout.

A timed-out write is only abandoned, never withdrawn. The ledger may still
commit it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ledger_client.backends.base import LedgerBackend
from ledger_client.errors import (
    LedgerError,
    LedgerReadError,
    LedgerUnavailable,
    LedgerWriteError,
    NoSigner,
    UserRejected,
)
from ledger_client.models import Receipt, Signer

logger = logging.getLogger("ledger_client.client")

DEFAULT_TIMEOUT_SECONDS = 30.0

_REJECTION_MARKERS = ("user rejected", "rejected by user", "user denied")


def _is_user_rejection(exc: Exception) -> bool:
    """Return True if a wallet/signer declined the transaction."""
    msg = str(exc).lower()
    return any(marker in msg for marker in _REJECTION_MARKERS)


class LedgerClient:
    """Access to a ledger, optionally bound to a signing identity."""

    def __init__(
        self,
        backend: LedgerBackend,
        signer: Optional[Signer] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.backend = backend
        self.timeout = timeout
        self._signer = signer

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer

    @property
    def read_only_mode(self) -> bool:
        return self._signer is None

    def with_signer(self, signer: Optional[Signer]) -> LedgerClient:
        """Return a client sharing this backend, bound to ``signer``."""
        return LedgerClient(self.backend, signer=signer, timeout=self.timeout)

    # ── Availability ─────────────────────────────────────────────────
    async def is_available(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self.backend.is_ready(), timeout=self.timeout))
        except asyncio.TimeoutError:
            logger.warning("Availability probe timed out after %.1fs", self.timeout)
            return False
        except LedgerUnavailable:
            return False
        except Exception as exc:
            logger.warning("Availability probe failed: %s", exc)
            return False

    async def ensure_available(self) -> None:
        if not await self.is_available():
            raise LedgerUnavailable(f"The {self.backend.name} ledger is not available")

    # ── Reads ────────────────────────────────────────────────────────
    async def read_only(self, key: str) -> bytes:
        """Read ``key``; returns ``b""`` when it was never written."""
        try:
            value = await asyncio.wait_for(self.backend.get(key), timeout=self.timeout)
        except LedgerError:
            raise
        except asyncio.TimeoutError as exc:
            raise LedgerReadError(
                f"Read timed out after {self.timeout:.1f}s", {"key": key}
            ) from exc
        except Exception as exc:
            raise LedgerReadError(f"Read failed: {exc}", {"key": key}) from exc
        return bytes(value) if value else b""

    async def list_keys(self, prefix: str = "") -> list[str]:
        try:
            return await asyncio.wait_for(self.backend.list_keys(prefix), timeout=self.timeout)
        except (LedgerError, NotImplementedError):
            raise
        except asyncio.TimeoutError as exc:
            raise LedgerReadError(
                f"Key enumeration timed out after {self.timeout:.1f}s", {"prefix": prefix}
            ) from exc
        except Exception as exc:
            raise LedgerReadError(f"Key enumeration failed: {exc}", {"prefix": prefix}) from exc

    # ── Writes ───────────────────────────────────────────────────────
    async def write(self, key: str, value: bytes) -> Receipt:
        """Write one key. Committed per key; never atomic with other writes."""
        if self._signer is None:
            raise NoSigner("A signing identity is required to write", {"key": key})

        try:
            receipt = await asyncio.wait_for(
                self.backend.set(key, value, self._signer), timeout=self.timeout
            )
        except LedgerError:
            raise
        except asyncio.TimeoutError as exc:
            raise LedgerWriteError(
                f"Write not confirmed after {self.timeout:.1f}s; it may still commit",
                {"key": key},
            ) from exc
        except Exception as exc:
            if _is_user_rejection(exc):
                raise UserRejected("Transaction rejected by user", {"key": key}) from exc
            raise LedgerWriteError(f"Write failed: {exc}", {"key": key}) from exc

        logger.info("Wrote %d bytes to %s (tx %s)", len(value), key, receipt.tx_id)
        return receipt

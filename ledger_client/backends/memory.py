"""
Ledger Backends — Local Ledgers
=================================

``InMemoryLedger`` keeps every key in a process-local dict. Each call
yields to the event loop once before touching state, so concurrent callers
interleave exactly as they would against a remote ledger.

``LocalFileLedger`` adds a JSON snapshot on disk so the CLI can be used
across invocations without a network ledger.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import json
import logging
from pathlib import Path

from ledger_client.backends.base import LedgerBackend
from ledger_client.errors import LedgerUnavailable, UserRejected
from ledger_client.models import Receipt, Signer

logger = logging.getLogger("ledger_client.memory")


class InMemoryLedger(LedgerBackend):
    """Dict-backed ledger with simulated suspension points."""

    name = "memory"

    def __init__(self, ready: bool = True) -> None:
        self.ready = ready
        self._data: dict[str, bytes] = {}
        self._declined: set[str] = set()
        self._round = 0

    # ── Ledger primitive ─────────────────────────────────────────────
    async def is_ready(self) -> bool:
        await asyncio.sleep(0)
        return self.ready

    async def get(self, key: str) -> bytes:
        await asyncio.sleep(0)
        self._check_ready()
        return self._data.get(key, b"")

    async def set(self, key: str, value: bytes, signer: Signer) -> Receipt:
        await asyncio.sleep(0)
        self._check_ready()
        if signer.address.lower() in self._declined:
            raise UserRejected("Transaction rejected by user", {"signer": signer.address, "key": key})

        self._data[key] = bytes(value)
        self._round += 1
        self._committed()

        tx_id = hashlib.sha256(f"{self._round}:{key}".encode()).hexdigest()[:52].upper()
        return Receipt(tx_id=tx_id, key=key, confirmed_round=self._round)

    async def list_keys(self, prefix: str = "") -> list[str]:
        await asyncio.sleep(0)
        self._check_ready()
        return sorted(k for k in self._data if k.startswith(prefix))

    # ── Test / operator controls ─────────────────────────────────────
    def decline(self, address: str) -> None:
        """Make every future write signed by ``address`` be declined."""
        self._declined.add(address.lower())

    def approve(self, address: str) -> None:
        self._declined.discard(address.lower())

    def seed(self, key: str, value: bytes) -> None:
        """Store raw bytes directly, bypassing signing."""
        self._data[key] = bytes(value)
        self._committed()

    def snapshot(self) -> dict[str, bytes]:
        return dict(self._data)

    def _check_ready(self) -> None:
        if not self.ready:
            raise LedgerUnavailable(f"The {self.name} ledger is not ready")

    def _committed(self) -> None:
        """Hook called after every state change."""


class LocalFileLedger(InMemoryLedger):
    """In-memory ledger persisted to a JSON file after every write."""

    name = "file"

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.is_file():
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._data = {k: base64.b64decode(v) for k, v in raw.get("entries", {}).items()}
            self._round = int(raw.get("round", 0))
            logger.info("Loaded %d ledger entries from %s", len(self._data), self.path)

    def _committed(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "round": self._round,
            "entries": {k: base64.b64encode(v).decode("ascii") for k, v in self._data.items()},
        }
        self.path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

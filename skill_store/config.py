"""
Skill Store — Configuration
=============================

Reads ``.env`` from the project root, then builds a ledger client and
record store for the selected backend.

Environment:
    LEDGER_BACKEND          algorand | file | memory (default: memory)
    SKILLGRAPH_APP_ID       SkillLedger application id (algorand only)
    SIGNER_ACCOUNT_NAME     algokit account prefix, reads <NAME>_MNEMONIC
                            (default: DEPLOYER)
    LEDGER_STATE_FILE       snapshot path for the file backend
    LEDGER_TIMEOUT_SECONDS  bound on every ledger call (default: 30)
    LOCAL_SIGNER_ADDRESS    signer identity for memory/file backends
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ledger_client import LedgerClient, Signer
from ledger_client.backends import InMemoryLedger, LedgerBackend, LocalFileLedger
from skill_store.store import IndexedRecordStore

logger = logging.getLogger("skill_store.config")

# ── Load .env from project root ─────────────────────────────────────────────
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────
BACKENDS = ("algorand", "file", "memory")

LEDGER_BACKEND = os.environ.get("LEDGER_BACKEND", "memory")
APP_ID = int(os.environ.get("SKILLGRAPH_APP_ID", "0"))
SIGNER_ACCOUNT_NAME = os.environ.get("SIGNER_ACCOUNT_NAME", "DEPLOYER")
LEDGER_STATE_FILE = os.environ.get("LEDGER_STATE_FILE", ".skillgraph-ledger.json")
LEDGER_TIMEOUT_SECONDS = float(os.environ.get("LEDGER_TIMEOUT_SECONDS", "30"))
LOCAL_SIGNER_ADDRESS = os.environ.get(
    "LOCAL_SIGNER_ADDRESS", "0x00000000000000000000000000000000000000AA"
)


def build_ledger(backend_name: Optional[str] = None) -> tuple[LedgerBackend, Optional[Signer]]:
    """Return (backend, signer) for the named backend."""
    name = (backend_name or LEDGER_BACKEND).lower()

    if name == "algorand":
        if not APP_ID:
            raise ValueError("SKILLGRAPH_APP_ID must be set to use the algorand ledger")
        from ledger_client.backends.algorand import AlgorandLedger

        ledger = AlgorandLedger(APP_ID)
        signer = None
        if os.environ.get(f"{SIGNER_ACCOUNT_NAME}_MNEMONIC"):
            signer = ledger.signer_from_environment(SIGNER_ACCOUNT_NAME)
        else:
            logger.warning("%s_MNEMONIC not set — ledger is read-only", SIGNER_ACCOUNT_NAME)
        return ledger, signer

    local_signer = Signer(address=LOCAL_SIGNER_ADDRESS, name="local")
    if name == "file":
        return LocalFileLedger(LEDGER_STATE_FILE), local_signer
    if name == "memory":
        return InMemoryLedger(), local_signer

    raise ValueError(f"Unsupported ledger backend '{name}'. Choose from: {', '.join(BACKENDS)}")


def build_store(backend_name: Optional[str] = None) -> IndexedRecordStore:
    backend, signer = build_ledger(backend_name)
    client = LedgerClient(backend, signer=signer, timeout=LEDGER_TIMEOUT_SECONDS)
    logger.info(
        "Record store ready — %s ledger, signer: %s",
        backend.name,
        signer.address if signer else "(none)",
    )
    return IndexedRecordStore(client)

"""
Backend — Shared Configuration
================================

Record store singleton and error → HTTP status mapping.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException

from skill_store.config import build_store
from skill_store.errors import (
    IndexCorrupted,
    InvalidRecord,
    InvalidTransition,
    LedgerUnavailable,
    NoSigner,
    NotOwner,
    RecordCorrupted,
    RecordNotFound,
    SkillGraphError,
    UserRejected,
)
from skill_store.store import IndexedRecordStore

logger = logging.getLogger("backend.config")

# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────
API_NAME = "SkillGraph API"
API_VERSION = "1.0.0"

_STATUS_BY_ERROR: tuple[tuple[type[SkillGraphError], int], ...] = (
    (InvalidRecord, 422),
    (RecordNotFound, 404),
    (NoSigner, 401),
    (UserRejected, 403),
    (NotOwner, 403),
    (InvalidTransition, 409),
    (RecordCorrupted, 500),
    (IndexCorrupted, 500),
    (LedgerUnavailable, 503),
)

# ─────────────────────────────────────────────────────────────────────────────
# Singleton store
# ─────────────────────────────────────────────────────────────────────────────
_store: IndexedRecordStore | None = None


def get_store() -> IndexedRecordStore:
    """Lazy-init the record store for the configured ledger."""
    global _store

    if _store is None:
        _store = build_store()
        logger.info("Record store initialized — ledger: %s", _store.client.backend.name)

    return _store


def http_error(exc: SkillGraphError) -> HTTPException:
    """Translate a store/ledger error into an HTTPException."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = 502

    if status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc, exc_info=exc)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(exc).__name__, "message": str(exc)},
    )

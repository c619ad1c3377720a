"""Skill Store — Package."""

from skill_store.encryption import Cipher, PlaceholderCipher
from skill_store.models import INDEX_KEY, RECORD_PREFIX, Record, RecordStats, RecordStatus
from skill_store.store import IndexedRecordStore

__all__ = [
    "IndexedRecordStore",
    "Record",
    "RecordStatus",
    "RecordStats",
    "Cipher",
    "PlaceholderCipher",
    "INDEX_KEY",
    "RECORD_PREFIX",
]

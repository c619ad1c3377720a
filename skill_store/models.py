"""
Skill Store — Data Models
===========================

Pydantic models for the records kept on the ledger, plus the codecs for
the persisted layout:

    "skill_keys"      → JSON array of record ids
    "record_" + id    → JSON object
                        {data, timestamp, owner, category, experience, status}
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from skill_store.errors import IndexCorrupted

INDEX_KEY = "skill_keys"
RECORD_PREFIX = "record_"


def record_key(record_id: str) -> str:
    return f"{RECORD_PREFIX}{record_id}"


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────
class RecordStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RecordStatus.PENDING


# ─────────────────────────────────────────────────────────────────────────────
# Record
# ─────────────────────────────────────────────────────────────────────────────
class Record(BaseModel):
    """One skill record as stored under ``record_<id>``.

    The id is not part of the stored object; it is the key suffix. Field
    aliases match the stored JSON names (``data``, ``timestamp``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    ciphertext: str = Field(alias="data")
    created_at: int = Field(alias="timestamp", ge=0)
    owner: str
    category: str
    experience: int = Field(default=0, ge=0)
    status: RecordStatus = RecordStatus.PENDING

    def is_owned_by(self, address: str) -> bool:
        return self.owner.lower() == address.lower()

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id"}, mode="json")

    def to_json(self) -> bytes:
        return json.dumps(self.to_payload()).encode("utf-8")

    @classmethod
    def from_payload(cls, record_id: str, payload: Any) -> Record:
        """Build a Record from a decoded JSON object.

        Raises ValueError (pydantic's ValidationError included) when the
        payload is not a usable record.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"record payload must be an object, got {type(payload).__name__}")
        return cls.model_validate({**payload, "id": record_id})

    @classmethod
    def from_json(cls, record_id: str, raw: bytes) -> Record:
        return cls.from_payload(record_id, json.loads(raw.decode("utf-8")))


# ─────────────────────────────────────────────────────────────────────────────
# Index codec
# ─────────────────────────────────────────────────────────────────────────────
def decode_index(raw: bytes) -> list[str]:
    """Decode the index payload. Empty bytes decode to an empty index."""
    if not raw:
        return []
    try:
        keys = json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        raise IndexCorrupted(f"Index is not valid JSON: {exc}") from exc

    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise IndexCorrupted("Index is not a JSON array of strings")
    return keys


def encode_index(keys: Iterable[str]) -> bytes:
    return json.dumps(list(keys)).encode("utf-8")


# ─────────────────────────────────────────────────────────────────────────────
# Analytics
# ─────────────────────────────────────────────────────────────────────────────
class CategoryCount(BaseModel):
    name: str
    count: int


class ExperienceBand(BaseModel):
    level: str
    min_years: int
    max_years: int
    count: int = 0


class RecordStats(BaseModel):
    """Dashboard figures over a listing."""
    total: int = 0
    verified: int = 0
    pending: int = 0
    rejected: int = 0
    categories: list[CategoryCount] = []
    experience: list[ExperienceBand] = []

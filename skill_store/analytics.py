"""
Skill Store — Analytics
=========================

Dashboard aggregates over a record listing: status totals, category
distribution, experience bands, search, and ciphertext matching.
Pure functions; callers supply the records from ``list_all()``.
"""

from __future__ import annotations

import logging
from typing import Iterable

from skill_store.encryption import Cipher, Predicate
from skill_store.errors import EncryptionError
from skill_store.models import (
    CategoryCount,
    ExperienceBand,
    Record,
    RecordStats,
    RecordStatus,
)

logger = logging.getLogger("skill_store.analytics")

# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────
EXPERIENCE_BANDS: tuple[tuple[str, int, int], ...] = (
    ("0-2 years", 0, 2),
    ("3-5 years", 3, 5),
    ("6-10 years", 6, 10),
    ("10+ years", 11, 100),
)


def summarize(records: Iterable[Record]) -> RecordStats:
    """Count records per status, per category, and per experience band."""
    records = list(records)

    categories: dict[str, int] = {}
    for rec in records:
        categories[rec.category] = categories.get(rec.category, 0) + 1

    bands = [
        ExperienceBand(
            level=level,
            min_years=low,
            max_years=high,
            count=sum(1 for r in records if low <= r.experience <= high),
        )
        for level, low, high in EXPERIENCE_BANDS
    ]

    return RecordStats(
        total=len(records),
        verified=sum(1 for r in records if r.status is RecordStatus.VERIFIED),
        pending=sum(1 for r in records if r.status is RecordStatus.PENDING),
        rejected=sum(1 for r in records if r.status is RecordStatus.REJECTED),
        categories=[CategoryCount(name=name, count=count) for name, count in categories.items()],
        experience=bands,
    )


def search(records: Iterable[Record], term: str) -> list[Record]:
    """Case-insensitive substring match on category or owner."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(records)
    return [r for r in records if needle in r.category.lower() or needle in r.owner.lower()]


def match_skills(records: Iterable[Record], cipher: Cipher, predicate: Predicate) -> list[Record]:
    """Records whose ciphertext satisfies ``predicate``.

    Records the cipher cannot read are left out.
    """
    matched: list[Record] = []
    for rec in records:
        try:
            if cipher.matches(rec.ciphertext, predicate):
                matched.append(rec)
        except EncryptionError as exc:
            logger.warning("Cannot match record %s: %s", rec.id, exc)
    return matched

"""
Skill Store — Indexed Record Store
====================================

Turns a flat key-value ledger into a listable collection of records.

Layout:
    "skill_keys"   → JSON array of every record id, append-only
    "record_<id>"  → one JSON record per id

Consistency model:
    • Every operation is a sequence of awaited ledger calls; other writers
      can interleave at each one.
    • create() writes the record first, then read-modify-writes the index.
      Two interleaved creates can drop one id from the index. The record
      itself stays on the ledger (an orphan) until reconcile() re-indexes it.
    • create() never writes over an index it cannot parse; reconcile()
      rebuilds one from the record keys.
    • Concurrent transitions on one record are last-write-wins.
    • Owner checks happen here, not on the ledger.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Callable, Optional

from ledger_client import LedgerClient
from skill_store.encryption import Cipher, PlaceholderCipher
from skill_store.errors import (
    IndexCorrupted,
    InvalidRecord,
    InvalidTransition,
    LedgerReadError,
    NoSigner,
    NotOwner,
    RecordCorrupted,
    RecordNotFound,
)
from skill_store.models import (
    INDEX_KEY,
    RECORD_PREFIX,
    Record,
    RecordStatus,
    decode_index,
    encode_index,
    record_key,
)

logger = logging.getLogger("skill_store.store")

ID_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 7


def new_record_id(now: Optional[float] = None) -> str:
    """Return ``<epoch millis>-<7 random base36 chars>``."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(ID_SUFFIX_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{millis}-{suffix}"


class IndexedRecordStore:
    """Record collection over a LedgerClient.

    Usage:
        store = IndexedRecordStore(LedgerClient(backend, signer=signer))
        record_id = await store.create("Blockchain", 5, "Solidity, Rust")
        records = await store.list_all()
    """

    def __init__(
        self,
        client: LedgerClient,
        cipher: Optional[Cipher] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.cipher = cipher or PlaceholderCipher()
        self.clock = clock

    # ── Listing ──────────────────────────────────────────────────────
    async def list_all(self) -> list[Record]:
        """Return every indexed record, newest first.

        Missing or unparsable records are skipped with a warning; a
        corrupted index lists as empty. Ties on ``created_at`` keep index
        order. Nothing is cached between calls.
        """
        await self.client.ensure_available()
        index = await self._read_index()

        records: list[Record] = []
        seen: set[str] = set()
        for record_id in index:
            if record_id in seen:
                logger.warning("Skipping record %s — listed twice in the index", record_id)
                continue
            seen.add(record_id)
            try:
                raw = await self.client.read_only(record_key(record_id))
            except LedgerReadError as exc:
                logger.warning("Skipping record %s — read failed: %s", record_id, exc)
                continue

            if not raw:
                logger.warning("Skipping record %s — indexed but not on the ledger", record_id)
                continue

            try:
                records.append(Record.from_json(record_id, raw))
            except ValueError as exc:
                logger.warning("Skipping record %s — unparsable: %s", record_id, exc)

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    async def get(self, record_id: str) -> Record:
        await self.client.ensure_available()
        _, record = await self._load(record_id)
        return record

    # ── Creation ─────────────────────────────────────────────────────
    async def create(
        self,
        category: str,
        experience: int,
        raw_skills: str,
        owner: Optional[str] = None,
    ) -> str:
        """Encrypt and store a new pending record, then index it.

        Parameters
        ----------
        category : str
            Free-text label, e.g. "Blockchain".
        experience : int
            Years of experience, non-negative.
        raw_skills : str
            Plaintext skills; only the ciphertext reaches the ledger.
        owner : str, optional
            Must be the attached signer's address (the default).

        Returns
        -------
        str
            The new record id.

        Raises IndexCorrupted rather than replace an unparsable index.
        A failure after the record write leaves an orphaned record; nothing
        is rolled back and nothing is retried.
        """
        signer = self.client.signer
        if signer is None:
            raise NoSigner("Connect a signing identity before submitting records")
        if owner is None:
            owner = signer.address
        elif not signer.matches(owner):
            raise NotOwner(
                "Records can only be created for the signing identity",
                {"owner": owner, "signer": signer.address},
            )

        if not category or not category.strip():
            raise InvalidRecord("category is required")
        if not raw_skills or not raw_skills.strip():
            raise InvalidRecord("skills are required")
        if isinstance(experience, bool) or not isinstance(experience, int) or experience < 0:
            raise InvalidRecord("experience must be a non-negative integer", {"experience": experience})

        await self.client.ensure_available()
        # A corrupted index would be overwritten by the append below.
        await self._load_index()

        ciphertext = self.cipher.encrypt(
            {"category": category, "experience": experience, "skills": raw_skills}
        )

        now = self.clock()
        record_id = new_record_id(now)
        record = Record(
            id=record_id,
            ciphertext=ciphertext,
            created_at=int(now),
            owner=owner,
            category=category,
            experience=experience,
            status=RecordStatus.PENDING,
        )

        await self.client.write(record_key(record_id), record.to_json())

        # Not atomic: another writer may replace the index between these calls.
        index = await self._load_index()
        index.append(record_id)
        await self.client.write(INDEX_KEY, encode_index(index))

        logger.info("Created record %s (%s, %d years) for %s", record_id, category, experience, owner)
        return record_id

    # ── Lifecycle ────────────────────────────────────────────────────
    async def transition_status(
        self,
        record_id: str,
        new_status: RecordStatus | str,
        actor: Optional[str] = None,
    ) -> Record:
        """Move a pending record to ``verified`` or ``rejected``.

        Only the owner may do this, signing as themselves: an explicit
        ``actor`` must match the attached signer. Every stored field other than
        ``status`` is written back untouched. The index is not modified.
        """
        signer = self.client.signer
        if signer is None:
            raise NoSigner("Connect a signing identity before changing a record")
        if actor is None:
            actor = signer.address
        elif not signer.matches(actor):
            raise NotOwner(
                "Records can only be changed by the signing identity",
                {"id": record_id, "actor": actor, "signer": signer.address},
            )

        try:
            target = RecordStatus(new_status)
        except ValueError as exc:
            raise InvalidTransition(f"Unknown status: {new_status}") from exc
        if target is RecordStatus.PENDING:
            raise InvalidTransition("Records cannot be moved back to pending", {"id": record_id})

        await self.client.ensure_available()
        payload, record = await self._load(record_id)

        if not record.is_owned_by(actor):
            raise NotOwner(
                "Only the record owner can change its status",
                {"id": record_id, "actor": actor},
            )
        if record.status.is_terminal:
            raise InvalidTransition(
                f"Record is already {record.status.value}",
                {"id": record_id, "requested": target.value},
            )

        payload["status"] = target.value
        await self.client.write(record_key(record_id), json.dumps(payload).encode("utf-8"))

        logger.info("Record %s: %s → %s", record_id, record.status.value, target.value)
        return record.model_copy(update={"status": target})

    async def verify(self, record_id: str) -> Record:
        return await self.transition_status(record_id, RecordStatus.VERIFIED)

    async def reject(self, record_id: str) -> Record:
        return await self.transition_status(record_id, RecordStatus.REJECTED)

    # ── Index repair ─────────────────────────────────────────────────
    async def reconcile(self) -> list[str]:
        """Append record ids that exist on the ledger but not in the index.

        Needs a backend that can enumerate keys. The repair is itself one
        read-modify-write of the index, so it can race like create() does;
        running it again picks up anything it missed.
        """
        await self.client.ensure_available()
        keys = await self.client.list_keys(RECORD_PREFIX)
        on_ledger = [k[len(RECORD_PREFIX):] for k in keys]

        index = await self._read_index()
        known = set(index)
        missing = [record_id for record_id in on_ledger if record_id not in known]
        if not missing:
            logger.info("Index is complete (%d records)", len(index))
            return []

        await self.client.write(INDEX_KEY, encode_index(index + missing))
        logger.warning("Re-indexed %d orphaned record(s): %s", len(missing), ", ".join(missing))
        return missing

    # ── Internals ────────────────────────────────────────────────────
    async def _load_index(self) -> list[str]:
        return decode_index(await self.client.read_only(INDEX_KEY))

    async def _read_index(self) -> list[str]:
        try:
            return await self._load_index()
        except IndexCorrupted as exc:
            logger.error("Treating index as empty: %s", exc)
            return []

    async def _load(self, record_id: str) -> tuple[dict, Record]:
        raw = await self.client.read_only(record_key(record_id))
        if not raw:
            raise RecordNotFound("Record not found", {"id": record_id})
        try:
            payload = json.loads(raw.decode("utf-8"))
            record = Record.from_payload(record_id, payload)
        except ValueError as exc:
            raise RecordCorrupted(f"Record is unparsable: {exc}", {"id": record_id}) from exc
        return payload, record

import json

import pytest

from conftest import OWNER, StepClock, run
from ledger_client import LedgerClient
from ledger_client.backends import InMemoryLedger
from skill_store.encryption import PlaceholderCipher
from skill_store.errors import (
    IndexCorrupted,
    InvalidRecord,
    InvalidTransition,
    LedgerUnavailable,
    LedgerWriteError,
    NoSigner,
    NotOwner,
    RecordCorrupted,
    RecordNotFound,
)
from skill_store.models import INDEX_KEY, RecordStatus, record_key
from skill_store.store import IndexedRecordStore, new_record_id


class FailingIndexLedger(InMemoryLedger):
    """Accepts record writes, fails every index write."""

    async def set(self, key, value, signer):
        if key == INDEX_KEY:
            raise ConnectionError("node went away")
        return await super().set(key, value, signer)


def _stored(ledger: InMemoryLedger, record_id: str) -> dict:
    return json.loads(ledger.snapshot()[record_key(record_id)])


# ── Listing ──────────────────────────────────────────────────────────────────
def test_uninitialized_ledger_lists_empty(store: IndexedRecordStore):
    assert run(store.list_all()) == []


def test_create_then_list(store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity, Rust", owner=OWNER))

    records = run(store.list_all())
    assert len(records) == 1
    rec = records[0]
    assert rec.id == record_id
    assert rec.status is RecordStatus.PENDING
    assert rec.category == "Blockchain"
    assert rec.experience == 5
    assert rec.owner == OWNER


def test_sequential_creates_list_newest_first(store: IndexedRecordStore):
    ids = [run(store.create(f"Category {i}", i, "Python")) for i in range(5)]

    records = run(store.list_all())
    assert [r.id for r in records] == list(reversed(ids))
    stamps = [r.created_at for r in records]
    assert stamps == sorted(stamps, reverse=True)


def test_equal_timestamps_keep_index_order(client: LedgerClient):
    store = IndexedRecordStore(client, clock=lambda: 1_700_000_000.0)
    ids = [run(store.create("DevOps", 1, "Terraform")) for _ in range(3)]
    assert [r.id for r in run(store.list_all())] == ids


def test_listing_is_idempotent(store: IndexedRecordStore):
    for i in range(3):
        run(store.create("AI/ML", i, "PyTorch"))
    assert run(store.list_all()) == run(store.list_all())


def test_corrupted_index_lists_empty(ledger: InMemoryLedger, store: IndexedRecordStore):
    run(store.create("Blockchain", 5, "Solidity"))
    ledger.seed(INDEX_KEY, b"{not json")
    assert run(store.list_all()) == []


def test_missing_and_corrupted_records_are_skipped(ledger: InMemoryLedger, store: IndexedRecordStore):
    good = run(store.create("Blockchain", 5, "Solidity"))
    broken = run(store.create("Data Science", 2, "pandas"))
    ledger.seed(record_key(broken), b"garbage")
    ledger.seed(INDEX_KEY, json.dumps(["ghost-id", broken, good]).encode())

    assert [r.id for r in run(store.list_all())] == [good]


def test_duplicate_index_entries_list_once(ledger: InMemoryLedger, store: IndexedRecordStore):
    first = run(store.create("Blockchain", 5, "Solidity"))
    second = run(store.create("DevOps", 3, "Terraform"))
    ledger.seed(INDEX_KEY, json.dumps([first, second, first]).encode())

    assert [r.id for r in run(store.list_all())] == [second, first]


def test_read_only_store_can_list(store: IndexedRecordStore, reader: IndexedRecordStore):
    run(store.create("Blockchain", 5, "Solidity"))
    assert len(run(reader.list_all())) == 1


def test_unavailable_ledger_fails_every_operation(ledger: InMemoryLedger, store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    ledger.ready = False
    with pytest.raises(LedgerUnavailable):
        run(store.list_all())
    with pytest.raises(LedgerUnavailable):
        run(store.create("Blockchain", 5, "Solidity"))
    with pytest.raises(LedgerUnavailable):
        run(store.verify(record_id))


# ── Creation ─────────────────────────────────────────────────────────────────
def test_create_stores_ciphertext_not_plaintext(ledger: InMemoryLedger, store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity, Rust"))

    stored = _stored(ledger, record_id)
    assert "Solidity" not in json.dumps(stored)
    assert PlaceholderCipher().decrypt(stored["data"]) == {
        "category": "Blockchain",
        "experience": 5,
        "skills": "Solidity, Rust",
    }
    assert json.loads(ledger.snapshot()[INDEX_KEY]) == [record_id]


@pytest.mark.parametrize(
    "category, experience, skills",
    [("", 1, "Rust"), ("  ", 1, "Rust"), ("Blockchain", 1, ""), ("Blockchain", -1, "Rust"), ("Blockchain", True, "Rust")],
)
def test_create_validates_input(ledger: InMemoryLedger, store: IndexedRecordStore, category, experience, skills):
    with pytest.raises(InvalidRecord):
        run(store.create(category, experience, skills))
    assert ledger.snapshot() == {}


def test_create_requires_signer(ledger: InMemoryLedger, reader: IndexedRecordStore):
    with pytest.raises(NoSigner):
        run(reader.create("Blockchain", 5, "Solidity"))
    assert ledger.snapshot() == {}


def test_create_for_someone_else_is_refused(store: IndexedRecordStore):
    with pytest.raises(NotOwner):
        run(store.create("Blockchain", 5, "Solidity", owner="0xCC"))


def test_failed_index_write_leaves_orphan(owner):
    ledger = FailingIndexLedger()
    store = IndexedRecordStore(LedgerClient(ledger, signer=owner), clock=StepClock())

    with pytest.raises(LedgerWriteError):
        run(store.create("Blockchain", 5, "Solidity"))

    orphans = [k for k in ledger.snapshot() if k.startswith("record_")]
    assert len(orphans) == 1
    assert run(store.list_all()) == []


def test_create_refuses_to_overwrite_a_corrupted_index(ledger: InMemoryLedger, store: IndexedRecordStore):
    ids = [run(store.create("DevOps", i, "Ansible")) for i in range(3)]
    truncated = ledger.snapshot()[INDEX_KEY][:-1]
    ledger.seed(INDEX_KEY, truncated)

    with pytest.raises(IndexCorrupted):
        run(store.create("Blockchain", 5, "Solidity"))

    assert ledger.snapshot()[INDEX_KEY] == truncated
    assert sorted(k for k in ledger.snapshot() if k.startswith("record_")) == sorted(record_key(i) for i in ids)


def test_index_corrupted_mid_create_is_left_alone(owner):
    class CorruptingLedger(InMemoryLedger):
        async def set(self, key, value, signer):
            receipt = await super().set(key, value, signer)
            if key.startswith("record_"):
                self.seed(INDEX_KEY, b'["1700000000000-abc')
            return receipt

    ledger = CorruptingLedger()
    store = IndexedRecordStore(LedgerClient(ledger, signer=owner), clock=StepClock())

    with pytest.raises(IndexCorrupted):
        run(store.create("Blockchain", 5, "Solidity"))

    assert ledger.snapshot()[INDEX_KEY] == b'["1700000000000-abc'


def test_record_ids_are_unique_and_timestamped():
    ids = {new_record_id(1_700_000_000.123) for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("1700000000123-") and len(i) == len("1700000000123-") + 7 for i in ids)


# ── Lifecycle ────────────────────────────────────────────────────────────────
def test_verify_then_reject_is_invalid(store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity, Rust", owner=OWNER))

    updated = run(store.transition_status(record_id, "verified", OWNER))
    assert updated.status is RecordStatus.VERIFIED
    assert [r.status for r in run(store.list_all())] == [RecordStatus.VERIFIED]

    with pytest.raises(InvalidTransition):
        run(store.transition_status(record_id, "rejected", OWNER))
    assert run(store.get(record_id)).status is RecordStatus.VERIFIED


@pytest.mark.parametrize("first", [RecordStatus.VERIFIED, RecordStatus.REJECTED])
@pytest.mark.parametrize("second", [RecordStatus.VERIFIED, RecordStatus.REJECTED])
def test_terminal_states_cannot_transition(store: IndexedRecordStore, first, second):
    record_id = run(store.create("DevOps", 3, "Kubernetes"))
    run(store.transition_status(record_id, first))
    with pytest.raises(InvalidTransition):
        run(store.transition_status(record_id, second))


def test_non_owner_cannot_transition(ledger: InMemoryLedger, store: IndexedRecordStore, other_store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    before = ledger.snapshot()[record_key(record_id)]

    with pytest.raises(NotOwner):
        run(other_store.verify(record_id))
    with pytest.raises(NotOwner):
        run(store.transition_status(record_id, RecordStatus.REJECTED, actor="0xBB"))

    assert ledger.snapshot()[record_key(record_id)] == before


def test_actor_must_be_the_signer(ledger: InMemoryLedger, store: IndexedRecordStore, other_store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    before = ledger.snapshot()[record_key(record_id)]

    with pytest.raises(NotOwner):
        run(other_store.transition_status(record_id, "verified", actor=OWNER))

    assert ledger.snapshot()[record_key(record_id)] == before
    assert run(store.get(record_id)).status is RecordStatus.PENDING


def test_owner_match_ignores_address_case(store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    assert run(store.transition_status(record_id, "rejected", actor="0xaa")).status is RecordStatus.REJECTED


@pytest.mark.parametrize("target", ["pending", "archived", ""])
def test_unsupported_targets(store: IndexedRecordStore, target):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    with pytest.raises(InvalidTransition):
        run(store.transition_status(record_id, target))


def test_transition_preserves_every_other_field(ledger: InMemoryLedger, store: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    stored = _stored(ledger, record_id)
    stored["note"] = "written by another client"
    ledger.seed(record_key(record_id), json.dumps(stored).encode())
    index_before = ledger.snapshot()[INDEX_KEY]

    run(store.reject(record_id))

    after = _stored(ledger, record_id)
    assert after == {**stored, "status": "rejected"}
    assert ledger.snapshot()[INDEX_KEY] == index_before


def test_transition_missing_record(store: IndexedRecordStore):
    with pytest.raises(RecordNotFound):
        run(store.verify("does-not-exist"))
    with pytest.raises(RecordNotFound):
        run(store.get("does-not-exist"))


def test_transition_corrupted_record(ledger: InMemoryLedger, store: IndexedRecordStore):
    ledger.seed(record_key("bad"), b'{"data": 1')
    with pytest.raises(RecordCorrupted):
        run(store.verify("bad"))


def test_transition_without_signer(store: IndexedRecordStore, reader: IndexedRecordStore):
    record_id = run(store.create("Blockchain", 5, "Solidity"))
    with pytest.raises(NoSigner):
        run(reader.verify(record_id))
    with pytest.raises(NoSigner):
        run(reader.transition_status(record_id, "verified", actor=OWNER))

import asyncio

import pytest

from ledger_client import LedgerClient, Signer
from ledger_client.backends import InMemoryLedger
from skill_store.store import IndexedRecordStore

OWNER = "0xAA"
OTHER = "0xBB"


class StepClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        current = self.now
        self.now += 1
        return current


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def owner() -> Signer:
    return Signer(address=OWNER)


@pytest.fixture
def other() -> Signer:
    return Signer(address=OTHER)


@pytest.fixture
def client(ledger: InMemoryLedger, owner: Signer) -> LedgerClient:
    return LedgerClient(ledger, signer=owner, timeout=5)


@pytest.fixture
def store(client: LedgerClient) -> IndexedRecordStore:
    return IndexedRecordStore(client, clock=StepClock())


@pytest.fixture
def other_store(ledger: InMemoryLedger, other: Signer) -> IndexedRecordStore:
    return IndexedRecordStore(LedgerClient(ledger, signer=other, timeout=5), clock=StepClock())


@pytest.fixture
def reader(ledger: InMemoryLedger) -> IndexedRecordStore:
    return IndexedRecordStore(LedgerClient(ledger, timeout=5))

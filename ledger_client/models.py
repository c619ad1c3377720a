"""
Ledger Client — Data Models
=============================

Identities and receipts exchanged across the ledger boundary.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Signer(BaseModel):
    """A signing identity allowed to submit ledger writes.

    ``address`` is the identity recorded as a record's owner. ``name`` is
    the account label the backend resolved it from, if any.
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., min_length=1)
    name: Optional[str] = None

    def matches(self, address: str) -> bool:
        return self.address.lower() == address.lower()


class Receipt(BaseModel):
    """Proof that a single-key write was accepted by the ledger."""

    model_config = ConfigDict(frozen=True)

    tx_id: str
    key: str
    confirmed_round: Optional[int] = None

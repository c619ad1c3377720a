"""
SkillGraph — Key-Value Ledger Smart Contract
==============================================

A flat, string-keyed byte store on Algorand. It knows nothing about
records or indexes; the off-chain IndexedRecordStore builds those on top.

Architecture:
  • One Box per ledger key; the Box name is the UTF-8 key itself.
  • set_data replaces the whole value (last write wins). Each call touches
    exactly one key; there are no multi-key transactions.
  • Anyone may read. Any sender may write any key: ownership checks live
    off-chain, in the record store.

Limits:
  • Box names are at most 64 bytes.
  • set_data carries the value as one app argument (2 KB cap). Larger
    values are written by resize_data followed by put_chunk calls in one
    atomic group.
  • The app account must hold the Minimum Balance for every Box byte.
"""

from algopy import ARC4Contract, Bytes, String, UInt64, op
from algopy.arc4 import abimethod


class SkillLedger(ARC4Contract):
    """Per-key byte storage backed by application Boxes.

    ABI Methods
    -----------
    set_data(key, value)
        Create or replace the Box named ``key``.
    resize_data(key, length), put_chunk(key, offset, chunk)
        Chunked writes for values over one app argument.
    get_data(key) → byte[]
        Return the Box contents, or empty bytes if it does not exist.
    is_available() → bool
        Readiness probe for clients.
    """

    # ── Write ─────────────────────────────────────────────────────────
    @abimethod()
    def set_data(self, key: String, value: Bytes) -> None:
        """Replace the value stored under ``key``.

        Box sizes are fixed at creation, so an existing Box is deleted and
        re-created with the new length.
        """
        box_key = key.bytes
        _length, box_exists = op.Box.length(box_key)
        if box_exists:
            _deleted = op.Box.delete(box_key)
        op.Box.put(box_key, value)

    @abimethod()
    def resize_data(self, key: String, length: UInt64) -> None:
        """Create the Box for ``key`` or resize it to ``length`` bytes."""
        box_key = key.bytes
        _length, box_exists = op.Box.length(box_key)
        if box_exists:
            op.Box.resize(box_key, length)
        else:
            _created = op.Box.create(box_key, length)

    @abimethod()
    def put_chunk(self, key: String, offset: UInt64, chunk: Bytes) -> None:
        """Overwrite ``chunk.length`` bytes of the Box starting at ``offset``."""
        op.Box.replace(key.bytes, offset, chunk)

    # ── Read ──────────────────────────────────────────────────────────
    @abimethod(readonly=True)
    def get_data(self, key: String) -> Bytes:
        box_data, box_exists = op.Box.get(key.bytes)
        if box_exists:
            return box_data
        return Bytes(b"")

    # ── Utility ───────────────────────────────────────────────────────
    @abimethod(readonly=True)
    def is_available(self) -> bool:
        return True

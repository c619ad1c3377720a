"""
Ledger Backends — Algorand Box Storage
========================================

Stores every ledger key as a Box of the SkillLedger application
(see ``smart_contracts/skill_ledger``).

    read   → algod ``GET /v2/applications/{id}/box`` (no signer needed)
    write  → ``set_data(string,byte[])void`` ABI call, signed by the sender;
             larger values go as one atomic group of ``resize_data`` plus
             ``put_chunk`` calls
    probe  → algod ``status()`` + application lookup
    list   → algod ``GET /v2/applications/{id}/boxes``

The SDK is synchronous, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any

import algokit_utils
from algokit_utils.models.transaction import SendParams
from algosdk import abi
from algosdk.error import AlgodHTTPError

from ledger_client.backends.base import LedgerBackend
from ledger_client.errors import LedgerWriteError
from ledger_client.models import Receipt, Signer

logger = logging.getLogger("ledger_client.algorand")

SET_DATA_METHOD = abi.Method.from_signature("set_data(string,byte[])void")
RESIZE_DATA_METHOD = abi.Method.from_signature("resize_data(string,uint64)void")
PUT_CHUNK_METHOD = abi.Method.from_signature("put_chunk(string,uint64,byte[])void")

# App args share a 2 KB cap with the selector and the key.
CHUNK_SIZE = 1536
MAX_GROUP_SIZE = 16
MAX_VALUE_SIZE = CHUNK_SIZE * (MAX_GROUP_SIZE - 1)
DEFAULT_VALIDITY_WINDOW = 1000


def default_send_params() -> SendParams:
    return SendParams(max_rounds_to_wait=1000, populate_app_call_resources=True)


class AlgorandLedger(LedgerBackend):
    """Key-value ledger backed by Algorand application boxes."""

    name = "algorand"

    def __init__(
        self,
        app_id: int,
        algorand: algokit_utils.AlgorandClient | None = None,
        validity_window: int = DEFAULT_VALIDITY_WINDOW,
    ) -> None:
        self.app_id = app_id
        self.algorand = algorand or algokit_utils.AlgorandClient.from_environment()
        self.algorand.set_default_validity_window(validity_window)

    def signer_from_environment(self, account_name: str = "DEPLOYER") -> Signer:
        """Register the ``<NAME>_MNEMONIC`` account and return it as a Signer."""
        account = self.algorand.account.from_environment(account_name)
        logger.info("Signer address : %s", account.address)
        return Signer(address=account.address, name=account_name)

    # ── Ledger primitive ─────────────────────────────────────────────
    async def is_ready(self) -> bool:
        return await asyncio.to_thread(self._is_ready_sync)

    async def get(self, key: str) -> bytes:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: bytes, signer: Signer) -> Receipt:
        return await asyncio.to_thread(self._set_sync, key, value, signer)

    async def list_keys(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._list_keys_sync, prefix)

    # ── Blocking implementations ─────────────────────────────────────
    def _is_ready_sync(self) -> bool:
        algod = self.algorand.client.algod
        try:
            status = algod.status()
            algod.application_info(self.app_id)
        except AlgodHTTPError as exc:
            logger.warning("Algod probe failed for app %d: %s", self.app_id, exc)
            return False

        # A node still catching up serves stale boxes.
        if status.get("catchup-time", 0):
            logger.warning("Algod node is catching up (round %s)", status.get("last-round"))
            return False
        return True

    def _get_sync(self, key: str) -> bytes:
        try:
            box = self.algorand.client.algod.application_box_by_name(
                self.app_id, key.encode("utf-8")
            )
        except AlgodHTTPError as exc:
            if exc.code == 404:
                return b""
            raise
        return base64.b64decode(box["value"])

    def _set_sync(self, key: str, value: bytes, signer: Signer) -> Receipt:
        if len(value) > MAX_VALUE_SIZE:
            raise LedgerWriteError(
                f"Value of {len(value)} bytes exceeds the {MAX_VALUE_SIZE}-byte limit "
                "of one transaction group",
                {"key": key, "size": len(value)},
            )
        if len(value) > CHUNK_SIZE:
            return self._set_chunked_sync(key, value, signer)

        result = self.algorand.send.app_call_method_call(
            self._call(signer, SET_DATA_METHOD, [key, value]),
            send_params=default_send_params(),
        )

        tx_id = result.tx_ids[0] if result.tx_ids else "N/A"
        confirmation: dict[str, Any] = getattr(result, "confirmation", None) or {}
        logger.info("set_data(%s) confirmed — tx %s", key, tx_id)
        return Receipt(
            tx_id=tx_id,
            key=key,
            confirmed_round=confirmation.get("confirmed-round"),
        )

    def _set_chunked_sync(self, key: str, value: bytes, signer: Signer) -> Receipt:
        """Resize the Box, then fill it chunk by chunk in one atomic group."""
        composer = self.algorand.new_group()
        composer.add_app_call_method_call(
            self._call(signer, RESIZE_DATA_METHOD, [key, len(value)])
        )
        for offset in range(0, len(value), CHUNK_SIZE):
            composer.add_app_call_method_call(
                self._call(signer, PUT_CHUNK_METHOD, [key, offset, value[offset:offset + CHUNK_SIZE]])
            )
        result = composer.send(default_send_params())

        tx_id = result.tx_ids[0] if result.tx_ids else "N/A"
        confirmations: list[dict[str, Any]] = getattr(result, "confirmations", None) or [{}]
        logger.info(
            "put_chunk(%s) confirmed — %d bytes in %d txns, first tx %s",
            key, len(value), len(result.tx_ids), tx_id,
        )
        return Receipt(
            tx_id=tx_id,
            key=key,
            confirmed_round=confirmations[-1].get("confirmed-round"),
        )

    def _call(self, signer: Signer, method: abi.Method, args: list[Any]) -> algokit_utils.AppCallMethodCallParams:
        return algokit_utils.AppCallMethodCallParams(
            sender=signer.address,
            app_id=self.app_id,
            method=method,
            args=args,
        )

    def _list_keys_sync(self, prefix: str) -> list[str]:
        response = self.algorand.client.algod.application_boxes(self.app_id)
        names = [
            base64.b64decode(box["name"]).decode("utf-8", errors="replace")
            for box in response.get("boxes", [])
        ]
        return sorted(n for n in names if n.startswith(prefix))

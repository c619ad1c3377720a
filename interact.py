"""
SkillGraph — Interaction Script
=================================

CLI for the indexed skill record store.

Usage:
    skillgraph list [--search <term>]
    skillgraph submit <category> <experience> <skills>
    skillgraph verify <record_id>
    skillgraph reject <record_id>
    skillgraph stats
    skillgraph reconcile

    Add --backend {algorand,file,memory} to override LEDGER_BACKEND.

Environment:
    Reads .env for LEDGER_BACKEND, SKILLGRAPH_APP_ID, ALGOD_SERVER,
    ALGOD_PORT, ALGOD_TOKEN and DEPLOYER_MNEMONIC.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from skill_store.analytics import search, summarize
from skill_store.config import BACKENDS, build_store
from skill_store.errors import AuthorizationError, SkillGraphError
from skill_store.models import Record
from skill_store.store import IndexedRecordStore

# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("skillgraph")


def _log_record(index: int, rec: Record) -> None:
    created = datetime.fromtimestamp(rec.created_at, tz=timezone.utc)
    logger.info("")
    logger.info("  Record #%d  %s", index, rec.id)
    logger.info("    Category   : %s", rec.category)
    logger.info("    Experience : %d years", rec.experience)
    logger.info("    Owner      : %s", rec.owner)
    logger.info("    Created    : %s", created.strftime("%b %d, %Y • %H:%M UTC"))
    logger.info("    Status     : %s", rec.status.value)


# ─────────────────────────────────────────────────────────────────────────────
# Core actions
# ─────────────────────────────────────────────────────────────────────────────
async def list_records(store: IndexedRecordStore, term: str | None) -> None:
    records = await store.list_all()
    if term:
        records = search(records, term)

    logger.info("─" * 60)
    if not records:
        logger.info("No skill records found.")
    else:
        logger.info("SKILL RECORDS (%d found)", len(records))
        logger.info("─" * 60)
        for i, rec in enumerate(records, 1):
            _log_record(i, rec)
    logger.info("─" * 60)


async def submit_record(store: IndexedRecordStore, category: str, experience: int, skills: str) -> None:
    logger.info("─" * 60)
    logger.info("SUBMIT SKILL RECORD")
    logger.info("─" * 60)
    logger.info("  Category   : %s", category)
    logger.info("  Experience : %d", experience)

    record_id = await store.create(category, experience, skills)

    logger.info("─" * 60)
    logger.info("✅ SKILL RECORD SUBMITTED")
    logger.info("  Record ID  : %s", record_id)
    logger.info("  Status     : pending")
    logger.info("─" * 60)


async def transition_record(store: IndexedRecordStore, record_id: str, action: str) -> None:
    if action == "verify":
        record = await store.verify(record_id)
    else:
        record = await store.reject(record_id)
    logger.info("✅ Record %s is now %s", record.id, record.status.value)


async def show_stats(store: IndexedRecordStore) -> None:
    stats = summarize(await store.list_all())

    logger.info("─" * 60)
    logger.info("SKILL ANALYTICS")
    logger.info("─" * 60)
    logger.info("  Total      : %d", stats.total)
    logger.info("  Verified   : %d", stats.verified)
    logger.info("  Pending    : %d", stats.pending)
    logger.info("  Rejected   : %d", stats.rejected)
    logger.info("")
    logger.info("  Categories")
    for cat in stats.categories:
        logger.info("    %-20s %d", cat.name, cat.count)
    logger.info("")
    logger.info("  Experience")
    for band in stats.experience:
        logger.info("    %-20s %d", band.level, band.count)
    logger.info("─" * 60)


async def reconcile_index(store: IndexedRecordStore) -> None:
    recovered = await store.reconcile()
    if recovered:
        logger.info("✅ Re-indexed %d record(s): %s", len(recovered), ", ".join(recovered))
    else:
        logger.info("✅ Index already complete.")


async def run(args: argparse.Namespace) -> None:
    store = build_store(args.backend)

    if args.command == "list":
        await list_records(store, args.search)
    elif args.command == "submit":
        await submit_record(store, args.category, args.experience, args.skills)
    elif args.command in ("verify", "reject"):
        await transition_record(store, args.record_id, args.command)
    elif args.command == "stats":
        await show_stats(store)
    elif args.command == "reconcile":
        await reconcile_index(store)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillgraph",
        description="SkillGraph — encrypted skill records on a key-value ledger",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=None,
        help="Ledger backend (default: LEDGER_BACKEND or memory)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List skill records, newest first")
    list_parser.add_argument("--search", type=str, default=None, help="Filter by category or owner")

    submit_parser = subparsers.add_parser("submit", help="Encrypt and submit a skill record")
    submit_parser.add_argument("category", type=str, help='Skill category (e.g. "Blockchain")')
    submit_parser.add_argument("experience", type=int, help="Years of experience (0–100)")
    submit_parser.add_argument("skills", type=str, help='Skills to encrypt (e.g. "Solidity, Rust")')

    for action in ("verify", "reject"):
        action_parser = subparsers.add_parser(action, help=f"{action.title()} one of your pending records")
        action_parser.add_argument("record_id", type=str, help="Record id")

    subparsers.add_parser("stats", help="Show record statistics")
    subparsers.add_parser("reconcile", help="Re-index records missing from the index")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "submit" and not 0 <= args.experience <= 100:
        logger.error("Experience must be between 0 and 100 (got %d)", args.experience)
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("\nInterrupted by user.")
        sys.exit(130)
    except AuthorizationError as exc:
        logger.error("❌ Not authorized: %s", exc)
        sys.exit(1)
    except SkillGraphError as exc:
        logger.error("❌ %s: %s", type(exc).__name__, exc)
        sys.exit(1)
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

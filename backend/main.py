"""
SkillGraph — FastAPI Backend
==============================

REST API over the indexed skill record store.

Endpoints:
    GET  /                      — Service info + ledger availability
    GET  /records               — List records (?search= filters)
    GET  /records/{id}          — Fetch one record
    POST /records               — Submit a new encrypted skill record
    POST /records/{id}/verify   — Verify a pending record (owner only)
    POST /records/{id}/reject   — Reject a pending record (owner only)
    GET  /stats                 — Dashboard statistics
    POST /reconcile             — Re-index orphaned records

Run:
    uvicorn backend.main:app --reload --port 8000
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import API_NAME, API_VERSION, get_store
from backend.routers import analytics, records
from skill_store.store import IndexedRecordStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("backend")

# ─────────────────────────────────────────────────────────────────────────────
# FastAPI App
# ─────────────────────────────────────────────────────────────────────────────
app = FastAPI(
    title=API_NAME,
    description="Encrypted skill records on a key-value ledger",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(records.router)
app.include_router(analytics.router)


@app.get("/")
async def root(store: IndexedRecordStore = Depends(get_store)):
    signer = store.client.signer
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "ledger": store.client.backend.name,
        "available": await store.client.is_available(),
        "signer": signer.address if signer else None,
    }

"""
Backend Router — Analytics & Maintenance
==========================================

GET  /stats      — Status totals, category distribution, experience bands
POST /reconcile  — Re-index records missing from the index
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from backend.config import get_store, http_error
from skill_store.analytics import summarize
from skill_store.errors import SkillGraphError
from skill_store.models import RecordStats
from skill_store.store import IndexedRecordStore

logger = logging.getLogger("backend.analytics")
router = APIRouter(tags=["Analytics"])


class ReconcileResponse(BaseModel):
    recovered_count: int
    recovered: list[str]


@router.get("/stats", response_model=RecordStats)
async def get_stats(store: IndexedRecordStore = Depends(get_store)):
    try:
        records = await store.list_all()
    except SkillGraphError as exc:
        raise http_error(exc) from exc
    return summarize(records)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_index(store: IndexedRecordStore = Depends(get_store)):
    """Append orphaned record ids to the index."""
    try:
        recovered = await store.reconcile()
    except NotImplementedError as exc:
        raise HTTPException(status_code=501, detail=str(exc))
    except SkillGraphError as exc:
        raise http_error(exc) from exc
    return ReconcileResponse(recovered_count=len(recovered), recovered=recovered)

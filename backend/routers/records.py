"""
Backend Router — Records
==========================

GET  /records               — List records, newest first
GET  /records/{id}          — Fetch one record
POST /records               — Encrypt and submit a new record
POST /records/{id}/verify   — Owner marks a pending record verified
POST /records/{id}/reject   — Owner marks a pending record rejected
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from backend.config import get_store, http_error
from skill_store.analytics import search
from skill_store.errors import SkillGraphError
from skill_store.models import Record, RecordStatus
from skill_store.store import IndexedRecordStore

logger = logging.getLogger("backend.records")
router = APIRouter(prefix="/records", tags=["Records"])


class CreateRecordRequest(BaseModel):
    category: str = Field(..., min_length=1, description="Skill category (e.g. 'Blockchain')")
    experience: int = Field(default=1, ge=0, le=100, description="Years of experience")
    skills: str = Field(..., min_length=1, description="Skills to encrypt (e.g. 'Solidity, Rust')")


class RecordItem(BaseModel):
    id: str
    category: str
    experience: int
    owner: str
    created_at: int
    status: RecordStatus
    ciphertext: str

    @classmethod
    def from_record(cls, record: Record) -> RecordItem:
        return cls(
            id=record.id,
            category=record.category,
            experience=record.experience,
            owner=record.owner,
            created_at=record.created_at,
            status=record.status,
            ciphertext=record.ciphertext,
        )


class RecordsResponse(BaseModel):
    record_count: int
    records: list[RecordItem]


class CreateRecordResponse(BaseModel):
    success: bool
    id: str
    owner: str
    status: RecordStatus


@router.get("", response_model=RecordsResponse)
async def list_records(
    search_term: Optional[str] = Query(default=None, alias="search"),
    store: IndexedRecordStore = Depends(get_store),
):
    """List every indexed record, optionally filtered by category/owner."""
    try:
        records = await store.list_all()
    except SkillGraphError as exc:
        raise http_error(exc) from exc

    if search_term:
        records = search(records, search_term)
    return RecordsResponse(
        record_count=len(records),
        records=[RecordItem.from_record(r) for r in records],
    )


@router.get("/{record_id}", response_model=RecordItem)
async def get_record(record_id: str, store: IndexedRecordStore = Depends(get_store)):
    try:
        return RecordItem.from_record(await store.get(record_id))
    except SkillGraphError as exc:
        raise http_error(exc) from exc


@router.post("", response_model=CreateRecordResponse, status_code=201)
async def create_record(req: CreateRecordRequest, store: IndexedRecordStore = Depends(get_store)):
    """Encrypt skills and submit a pending record for the server's signer."""
    try:
        record_id = await store.create(req.category, req.experience, req.skills)
    except SkillGraphError as exc:
        raise http_error(exc) from exc

    return CreateRecordResponse(
        success=True,
        id=record_id,
        owner=store.client.signer.address,
        status=RecordStatus.PENDING,
    )


@router.post("/{record_id}/verify", response_model=RecordItem)
async def verify_record(record_id: str, store: IndexedRecordStore = Depends(get_store)):
    try:
        return RecordItem.from_record(await store.verify(record_id))
    except SkillGraphError as exc:
        raise http_error(exc) from exc


@router.post("/{record_id}/reject", response_model=RecordItem)
async def reject_record(record_id: str, store: IndexedRecordStore = Depends(get_store)):
    try:
        return RecordItem.from_record(await store.reject(record_id))
    except SkillGraphError as exc:
        raise http_error(exc) from exc

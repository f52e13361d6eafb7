"""Handoff listing API — lets advisors see who is waiting for them.

Endpoints
---------
GET /handoffs?limit=...               → most recent handoffs
GET /handoffs?correspondent=...       → one correspondent's handoffs
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from anm_bot.database.engine import get_session
from anm_bot.database.repository import HandoffRepository

router = APIRouter(prefix="/handoffs", tags=["handoffs"])


class HandoffInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    correspondent_id: str
    topic: str
    created_at: datetime


@router.get("", response_model=list[HandoffInfo])
async def list_handoffs(
    limit: int = Query(50, ge=1, le=500),
    correspondent: str | None = Query(None, description="Filter by correspondent id"),
    session: AsyncSession = Depends(get_session),
):
    """Most recent handoffs first, or one correspondent's history."""
    repo = HandoffRepository(session)
    if correspondent:
        rows = await repo.for_correspondent(correspondent)
    else:
        rows = await repo.recent(limit)
    return [HandoffInfo.model_validate(row) for row in rows]

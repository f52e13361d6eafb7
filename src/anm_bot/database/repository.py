"""Handoff repository — data access layer for handoff records."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from anm_bot.models.handoff import Handoff


class HandoffRepository:
    """Encapsulates all database queries related to handoffs."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, correspondent_id: str, topic: str) -> Handoff:
        """Stage a new handoff row; the caller commits."""
        handoff = Handoff(correspondent_id=correspondent_id, topic=topic)
        self._session.add(handoff)
        await self._session.flush()
        return handoff

    async def recent(self, limit: int = 50) -> Sequence[Handoff]:
        """Most recent handoffs first."""
        stmt = select(Handoff).order_by(Handoff.created_at.desc(), Handoff.id.desc()).limit(limit)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def for_correspondent(self, correspondent_id: str) -> Sequence[Handoff]:
        """All handoffs of one correspondent, oldest first."""
        stmt = (
            select(Handoff)
            .where(Handoff.correspondent_id == correspondent_id)
            .order_by(Handoff.created_at, Handoff.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

"""Handoff service — records each handoff and alerts the advisors."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from anm_bot.database.repository import HandoffRepository
from anm_bot.services.email_service import EmailService

logger = logging.getLogger(__name__)


class HandoffService:
    """Persists handoffs and sends the advisor alert.

    Both steps are best-effort: a failure is logged and never reaches the
    dialog that triggered the handoff.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        email_service: EmailService | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._email = email_service or EmailService()

    async def record(self, correspondent_id: str, topic: str) -> None:
        try:
            async with self._session_factory() as db_session:
                await HandoffRepository(db_session).add(correspondent_id, topic)
                await db_session.commit()
        except Exception:
            logger.exception("Failed to store handoff for %s", correspondent_id)

        try:
            await self._email.send_handoff_alert(correspondent_id, topic)
        except Exception:
            logger.exception("Failed to send handoff alert for %s", correspondent_id)

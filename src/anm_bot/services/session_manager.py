"""Chat store — tracks per-correspondent dialog state."""

from __future__ import annotations

import logging

from anm_bot.models.chat import ChatState

logger = logging.getLogger(__name__)


class ChatStore:
    """In-memory ``ChatState`` store keyed by correspondent id.

    Holds at most one state per correspondent.  Creation is explicit so
    callers can tell a first contact from a returning correspondent.
    """

    def __init__(self) -> None:
        self._chats: dict[str, ChatState] = {}

    def get(self, correspondent_id: str) -> ChatState | None:
        return self._chats.get(correspondent_id)

    def create(self, correspondent_id: str) -> ChatState:
        """Create (or replace) the state for *correspondent_id*."""
        logger.info("Creating new chat for %s", correspondent_id)
        chat = ChatState(correspondent_id=correspondent_id)
        self._chats[correspondent_id] = chat
        return chat

    def clear(self, correspondent_id: str) -> None:
        """Remove a chat (e.g. on inactivity timeout)."""
        if self._chats.pop(correspondent_id, None) is not None:
            logger.info("Chat cleared for %s", correspondent_id)

    def clear_all(self) -> int:
        count = len(self._chats)
        self._chats.clear()
        return count

    def __contains__(self, correspondent_id: object) -> bool:
        return correspondent_id in self._chats

    @property
    def active_count(self) -> int:
        """Number of active chats (useful for monitoring)."""
        return len(self._chats)

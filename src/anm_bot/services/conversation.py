"""Conversation service — runs each correspondent's dialog and inactivity timers."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Awaitable, Callable

from anm_bot.agents import catalog
from anm_bot.agents.base import AgentResponse, BaseAgent
from anm_bot.agents.menu_agent import MenuAgent
from anm_bot.errors import DeliverySendFailure
from anm_bot.services.session_manager import ChatStore
from anm_bot.services.timers import TimerRegistry

logger = logging.getLogger(__name__)

Sender = Callable[[str, str], Awaitable[None]]
HandoffHook = Callable[[str, str], Awaitable[None]]


class ConversationService:
    """Central dialog driver for every correspondent.

    Responsibilities
    ----------------
    * Keeps one ``ChatState`` per correspondent in a ``ChatStore``.
    * Delegates stage transitions to the dialog agent.
    * Re-arms the inactivity timer pair on every counted message.
    * Delivers replies through *send*; delivery failures are logged and
      never roll the dialog back.

    Messages and timer actions for one correspondent run under that
    correspondent's lock, so they apply in arrival order and never
    interleave.  Different correspondents do not block each other.
    """

    def __init__(
        self,
        send: Sender,
        timers: TimerRegistry,
        agent: BaseAgent | None = None,
        store: ChatStore | None = None,
        on_handoff: HandoffHook | None = None,
    ) -> None:
        self._send = send
        self._timers = timers
        self._agent = agent or MenuAgent()
        self._store = store or ChatStore()
        self._on_handoff = on_handoff
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._epoch = 0

    @property
    def store(self) -> ChatStore:
        return self._store

    @property
    def timers(self) -> TimerRegistry:
        return self._timers

    @property
    def epoch(self) -> int:
        """Bumped by every ``clear_all()``."""
        return self._epoch

    async def handle_message(
        self, correspondent_id: str, text: str, epoch: int | None = None
    ) -> AgentResponse:
        """Apply one inbound message and send the reply, if any.

        *epoch* is the value of :attr:`epoch` when the message was received;
        the message is dropped if the chats were cleared since.
        """
        if epoch is None:
            epoch = self._epoch
        async with self._lock_for(correspondent_id):
            if epoch != self._epoch:
                logger.info("Dropping message from %s received before chats were cleared", correspondent_id)
                return AgentResponse()

            chat = self._store.get(correspondent_id)
            if chat is None:
                chat = self._store.create(correspondent_id)
                response = await self._agent.greet(chat)
            else:
                was_with_agent = chat.with_agent
                response = await self._agent.handle(text, chat)
                if was_with_agent and chat.with_agent:
                    logger.debug("%s is with an advisor; bot stays silent", correspondent_id)
                    return response

            chat.touch()
            self._arm(correspondent_id)
            logger.info("Routing %s → %s (stage=%s)", correspondent_id, self._agent.name, chat.stage.value)

            if not response.is_silent:
                await self._deliver(correspondent_id, response.reply_text)
            if response.handoff_topic and self._on_handoff is not None:
                await self._on_handoff(correspondent_id, response.handoff_topic)
            return response

    def clear_all(self) -> None:
        """Cancel every armed timer and forget every chat."""
        self._epoch += 1
        self._timers.cancel_all()
        count = self._store.clear_all()
        if count:
            logger.info("Cleared %d chat(s)", count)

    # ── Timer actions ────────────────────────────────────

    async def _on_warning(self, correspondent_id: str, generation: int) -> None:
        async with self._lock_for(correspondent_id):
            if not self._timers.is_current(correspondent_id, generation):
                return
            chat = self._store.get(correspondent_id)
            if chat is None or chat.warning_issued:
                return
            chat.warning_issued = True
            logger.info("Inactivity warning for %s", correspondent_id)
            await self._deliver(correspondent_id, catalog.INACTIVITY_WARNING)

    async def _on_reset(self, correspondent_id: str, generation: int) -> None:
        async with self._lock_for(correspondent_id):
            if not self._timers.is_current(correspondent_id, generation):
                return
            self._timers.cancel(correspondent_id)
            if correspondent_id not in self._store:
                return
            self._store.clear(correspondent_id)
            logger.info("Chat for %s reset after inactivity", correspondent_id)
            await self._deliver(correspondent_id, catalog.CHAT_RESET_NOTICE)

    # ── Private helpers ──────────────────────────────────

    def _arm(self, correspondent_id: str) -> None:
        self._timers.arm(correspondent_id, self._on_warning, self._on_reset)

    def _lock_for(self, correspondent_id: str) -> asyncio.Lock:
        lock = self._locks.get(correspondent_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[correspondent_id] = lock
        return lock

    async def _deliver(self, correspondent_id: str, text: str) -> None:
        try:
            await self._send(correspondent_id, text)
        except DeliverySendFailure as exc:
            logger.warning("Reply to %s not delivered: %s", correspondent_id, exc)
        except Exception:
            logger.exception("Unexpected error delivering reply to %s", correspondent_id)

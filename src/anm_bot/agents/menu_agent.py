"""Menu agent — walks a correspondent through the service menu to a human advisor."""

from __future__ import annotations

import logging

from anm_bot.agents import catalog
from anm_bot.agents.base import AgentResponse, BaseAgent
from anm_bot.models.chat import ChatState, Stage

logger = logging.getLogger(__name__)


class MenuAgent(BaseAgent):
    """Menu-driven dialog with a human handoff.

    Flow
    ----
    1. A first message from anyone gets the greeting and the main menu.
    2. ``1``-``4`` open a service's lettered options, ``5`` the combos,
       ``6`` hands over to an advisor straight away.
    3. A valid letter or combo number hands over to an advisor.
    4. While an advisor has the chat the bot stays silent.
    5. ``menu`` returns to the main menu from anywhere, advisor included.
    """

    @property
    def name(self) -> str:
        return "MenuAgent"

    async def greet(self, chat: ChatState) -> AgentResponse:
        chat.move_to(Stage.MENU)
        return AgentResponse(reply_text=catalog.greeting_menu())

    async def handle(self, message: str, chat: ChatState) -> AgentResponse:
        """Route to the handler for the chat's current stage."""
        text = message.strip().lower()

        if text == catalog.MENU_KEYWORD:
            chat.move_to(Stage.MENU)
            return AgentResponse(reply_text=catalog.main_menu())

        if chat.stage is Stage.WITH_AGENT:
            return AgentResponse()

        if chat.stage is Stage.SERVICE_DETAIL:
            return self._handle_service_option(text, chat)

        if chat.stage is Stage.COMBO_DETAIL:
            return self._handle_combo(text, chat)

        return self._handle_menu(text, chat)

    # ── Private helpers ──────────────────────────────────

    def _handle_menu(self, text: str, chat: ChatState) -> AgentResponse:
        service = catalog.SERVICE_OPTIONS.get(text)
        if service is not None:
            chat.move_to(Stage.SERVICE_DETAIL, service.service_id)
            return AgentResponse(reply_text=catalog.service_detail(service))

        if text == catalog.COMBO_OPTION:
            chat.move_to(Stage.COMBO_DETAIL)
            return AgentResponse(reply_text=catalog.combo_listing())

        if text == catalog.ADVISOR_OPTION:
            return self._handoff(chat, catalog.ADVISOR_TOPIC)

        logger.debug("Invalid menu option from %s: %r", chat.correspondent_id, text)
        return AgentResponse(reply_text=catalog.INVALID_MENU_OPTION)

    def _handle_service_option(self, text: str, chat: ChatState) -> AgentResponse:
        service = catalog.SERVICES.get(chat.service_id or 0)
        if service is None:
            # Unknown service id can only come from a hand-built state.
            chat.move_to(Stage.MENU)
            return AgentResponse(reply_text=catalog.main_menu())

        if text in service.options:
            return self._handoff(chat, f"{service.title} / {service.options[text]}")

        return AgentResponse(reply_text=catalog.invalid_service_option(service))

    def _handle_combo(self, text: str, chat: ChatState) -> AgentResponse:
        combo = catalog.COMBOS.get(text)
        if combo is None:
            return AgentResponse(reply_text=catalog.INVALID_COMBO)
        return self._handoff(chat, combo.title)

    def _handoff(self, chat: ChatState, topic: str) -> AgentResponse:
        chat.move_to(Stage.WITH_AGENT)
        logger.info("Handing %s over to an advisor (%s)", chat.correspondent_id, topic)
        return AgentResponse(reply_text=catalog.HANDOFF_NOTICE, handoff_topic=topic)

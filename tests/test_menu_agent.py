"""Tests for the MenuAgent — verifies the menu dialog transition table."""

from __future__ import annotations

import pytest

from anm_bot.agents import catalog
from anm_bot.agents.menu_agent import MenuAgent
from anm_bot.models.chat import ChatState, Stage


@pytest.fixture
def agent():
    return MenuAgent()


@pytest.fixture
def chat():
    return ChatState(correspondent_id="5215512345678")


# ──────────────────────────────────────────────────────────
# Test 1: First contact gets greeting + menu
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_greet_opens_main_menu(agent, chat):
    response = await agent.greet(chat)

    assert chat.stage is Stage.MENU
    assert "Bienvenido" in response.reply_text
    for option in range(1, 7):
        assert f"*{option}.*" in response.reply_text
    assert response.handoff_topic is None


# ──────────────────────────────────────────────────────────
# Test 2: Service options 1-4 open the lettered list
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
@pytest.mark.parametrize("option", ["1", "2", "3", "4"])
async def test_menu_service_options(agent, chat, option):
    response = await agent.handle(f"  {option} ", chat)

    service = catalog.SERVICES[int(option)]
    assert chat.stage is Stage.SERVICE_DETAIL
    assert chat.service_id == int(option)
    assert service.title in response.reply_text
    for letter in service.options:
        assert f"*{letter})*" in response.reply_text


@pytest.mark.asyncio
async def test_marketing_lists_three_options(agent, chat):
    response = await agent.handle("2", chat)

    assert "Marketing Digital" in response.reply_text
    assert response.reply_text.count(")*") == 3


@pytest.mark.asyncio
async def test_menu_combo_option(agent, chat):
    response = await agent.handle("5", chat)

    assert chat.stage is Stage.COMBO_DETAIL
    assert response.reply_text == catalog.combo_listing()


@pytest.mark.asyncio
async def test_menu_advisor_option_hands_off(agent, chat):
    response = await agent.handle("6", chat)

    assert chat.stage is Stage.WITH_AGENT
    assert chat.with_agent
    assert response.reply_text == catalog.HANDOFF_NOTICE
    assert response.handoff_topic == catalog.ADVISOR_TOPIC


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["9", "0", "hola", "", "a", "²", "02", "٢"])
async def test_menu_invalid_option(agent, chat, text):
    response = await agent.handle(text, chat)

    assert chat.stage is Stage.MENU
    assert response.reply_text == catalog.INVALID_MENU_OPTION


# ──────────────────────────────────────────────────────────
# Test 3: Service detail letters
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_service_letter_hands_off(agent, chat):
    chat.move_to(Stage.SERVICE_DETAIL, 2)

    response = await agent.handle("B", chat)

    assert chat.stage is Stage.WITH_AGENT
    assert chat.service_id is None
    assert response.reply_text == catalog.HANDOFF_NOTICE
    assert response.handoff_topic == "Marketing Digital / Publicidad pagada (Google y Meta)"


@pytest.mark.asyncio
async def test_service_invalid_letter_stays(agent, chat):
    chat.move_to(Stage.SERVICE_DETAIL, 1)

    response = await agent.handle("z", chat)

    assert chat.stage is Stage.SERVICE_DETAIL
    assert chat.service_id == 1
    assert "no válida" in response.reply_text
    assert response.handoff_topic is None


@pytest.mark.asyncio
async def test_service_detail_with_unknown_service_falls_back_to_menu(agent, chat):
    chat.move_to(Stage.SERVICE_DETAIL, 42)

    response = await agent.handle("a", chat)

    assert chat.stage is Stage.MENU
    assert response.reply_text == catalog.main_menu()


# ──────────────────────────────────────────────────────────
# Test 4: Combos
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
@pytest.mark.parametrize("combo", ["1", "2", "3"])
async def test_combo_hands_off(agent, chat, combo):
    chat.move_to(Stage.COMBO_DETAIL)

    response = await agent.handle(combo, chat)

    assert chat.stage is Stage.WITH_AGENT
    assert response.handoff_topic == catalog.COMBOS[combo].title


@pytest.mark.asyncio
async def test_invalid_combo_stays(agent, chat):
    chat.move_to(Stage.COMBO_DETAIL)

    response = await agent.handle("4", chat)

    assert chat.stage is Stage.COMBO_DETAIL
    assert response.reply_text == catalog.INVALID_COMBO


# ──────────────────────────────────────────────────────────
# Test 5: With an advisor and the menu keyword
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_with_agent_is_silent(agent, chat):
    chat.move_to(Stage.WITH_AGENT)

    response = await agent.handle("1", chat)

    assert response.is_silent
    assert chat.stage is Stage.WITH_AGENT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stage,service_id",
    [
        (Stage.MENU, None),
        (Stage.SERVICE_DETAIL, 3),
        (Stage.COMBO_DETAIL, None),
        (Stage.WITH_AGENT, None),
    ],
)
async def test_menu_keyword_always_returns_to_menu(agent, chat, stage, service_id):
    chat.move_to(stage, service_id)

    for _ in range(2):
        response = await agent.handle(" MENU ", chat)
        assert chat.stage is Stage.MENU
        assert not chat.with_agent
        assert response.reply_text == catalog.main_menu()


@pytest.mark.asyncio
async def test_stage_is_always_defined(agent, chat):
    inputs = ["1", "x", "a", "menu", "5", "7", "2", "menu", "6", "hola", "menu", "9"]
    for text in inputs:
        await agent.handle(text, chat)
        assert chat.stage in set(Stage)
        assert (chat.service_id is not None) == (chat.stage is Stage.SERVICE_DETAIL)

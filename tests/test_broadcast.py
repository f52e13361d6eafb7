"""Tests for the BroadcastHub — replay on attach, fan-out and command routing."""

from __future__ import annotations

import json

import pytest
import pytest_asyncio

from anm_bot.models.session import SessionStatus
from anm_bot.services.broadcast import BroadcastHub
from anm_bot.services.connection_manager import ConnectionManager
from anm_bot.services.timers import TimerRegistry
from anm_bot.transport.local import LocalTransport


class FakeObserver:
    """Records every frame it is sent."""

    def __init__(self, is_open: bool = True, fail: bool = False) -> None:
        self.is_open = is_open
        self.fail = fail
        self.frames: list[dict] = []

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.frames.append(data)

    @property
    def types(self) -> list[str]:
        return [f["type"] for f in self.frames]


@pytest_asyncio.fixture
async def setup():
    clients: list[LocalTransport] = []

    def factory() -> LocalTransport:
        client = LocalTransport()
        clients.append(client)
        return client

    manager = ConnectionManager(factory, TimerRegistry(warning_delay=60, reset_delay=60))
    hub = BroadcastHub(manager)
    await manager.open()
    yield manager, hub, clients
    await manager.close()


async def _command(hub, observer, command_type: str) -> None:
    await hub.handle_command(observer, json.dumps({"type": command_type}))


# ──────────────────────────────────────────────────────────
# Replay on attach
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_attach_while_stopped_replays_nothing(setup):
    _, hub, _ = setup
    observer = FakeObserver()

    await hub.attach(observer)

    assert observer.frames == []
    assert hub.observer_count == 1


@pytest.mark.asyncio
async def test_attach_while_code_pending_replays_one_qr_first(setup):
    manager, hub, clients = setup
    await manager.start()
    await manager.drain()
    code = manager.session.last_qr_code
    observer = FakeObserver()

    await hub.attach(observer)
    clients[0].pair()
    await manager.drain()

    assert observer.frames[0] == {"type": "qr", "code": code}
    assert observer.types == ["qr", "authenticated", "ready"]


@pytest.mark.asyncio
async def test_attach_while_connected_replays_one_ready(setup):
    manager, hub, clients = setup
    await manager.start()
    await manager.drain()
    clients[0].pair()
    await manager.drain()
    observer = FakeObserver()

    await hub.attach(observer)

    assert observer.frames == [{"type": "ready"}]


# ──────────────────────────────────────────────────────────
# Fan-out
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_events_reach_every_observer(setup):
    manager, hub, _ = setup
    first, second = FakeObserver(), FakeObserver()
    await hub.attach(first)
    await hub.attach(second)

    await _command(hub, first, "start")
    await manager.drain()

    assert first.types == ["started", "qr"]
    assert second.types == ["started", "qr"]


@pytest.mark.asyncio
async def test_failing_or_closed_observer_is_skipped(setup):
    manager, hub, _ = setup
    broken, closed, healthy = FakeObserver(fail=True), FakeObserver(is_open=False), FakeObserver()
    for observer in (broken, closed, healthy):
        await hub.attach(observer)

    await manager.start()
    await manager.drain()

    assert healthy.types == ["started", "qr"]
    assert closed.frames == []
    assert manager.session.status is SessionStatus.AWAITING_AUTH
    assert hub.observer_count == 3


@pytest.mark.asyncio
async def test_detached_observer_receives_nothing(setup):
    manager, hub, _ = setup
    observer = FakeObserver()
    await hub.attach(observer)
    await hub.detach(observer)

    await manager.start()
    await manager.drain()

    assert observer.frames == []
    assert hub.observer_count == 0


# ──────────────────────────────────────────────────────────
# Commands
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_ping_only_answers_requester(setup):
    manager, hub, _ = setup
    requester, bystander = FakeObserver(), FakeObserver()
    await hub.attach(requester)
    await hub.attach(bystander)

    await _command(hub, requester, "ping")

    assert requester.frames == [{"type": "pong"}]
    assert bystander.frames == []
    assert manager.session.status is SessionStatus.STOPPED


@pytest.mark.asyncio
async def test_get_state_only_answers_requester(setup):
    manager, hub, _ = setup
    requester, bystander = FakeObserver(), FakeObserver()
    await hub.attach(requester)
    await hub.attach(bystander)

    await _command(hub, requester, "getState")

    assert requester.frames == [{"type": "disconnected"}]
    assert bystander.frames == []


@pytest.mark.asyncio
async def test_stop_and_reset_commands_act_on_shared_session(setup):
    manager, hub, clients = setup
    operator, watcher = FakeObserver(), FakeObserver()
    await hub.attach(operator)
    await hub.attach(watcher)

    await _command(hub, operator, "start")
    await _command(hub, watcher, "reset")
    await manager.drain()
    await _command(hub, operator, "stop")

    assert len(clients) == 2
    assert manager.session.status is SessionStatus.STOPPED
    assert watcher.types == ["started", "stopped", "started", "reset", "qr", "stopped"]
    assert operator.types == watcher.types


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw,fragment",
    [
        ("not json", "Invalid JSON"),
        ('{"type": "dance"}', "dance"),
        ('{"kind": "start"}', "missing"),
    ],
)
async def test_malformed_command_answers_requester_only(setup, raw, fragment):
    manager, hub, _ = setup
    requester, bystander = FakeObserver(), FakeObserver()
    await hub.attach(requester)
    await hub.attach(bystander)

    await hub.handle_command(requester, raw)

    assert requester.types == ["error"]
    assert fragment in requester.frames[0]["message"]
    assert bystander.frames == []
    assert manager.session.status is SessionStatus.STOPPED


@pytest.mark.asyncio
async def test_start_failure_is_broadcast_as_error():
    def factory() -> LocalTransport:
        return LocalTransport(fail_connect=True)

    manager = ConnectionManager(factory, TimerRegistry(60, 60))
    hub = BroadcastHub(manager)
    await manager.open()
    try:
        observer = FakeObserver()
        await hub.attach(observer)

        await _command(hub, observer, "start")

        assert observer.types == ["error"]
        assert manager.session.status is SessionStatus.STOPPED
    finally:
        await manager.close()

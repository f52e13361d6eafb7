"""Broadcast hub — fans lifecycle events out to operator observers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from anm_bot.errors import MalformedCommand
from anm_bot.models.events import LifecycleEvent, parse_command
from anm_bot.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class Observer(Protocol):
    """Duplex channel an operator is attached through."""

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, data: dict[str, Any]) -> None: ...


class BroadcastHub:
    """Delivers every lifecycle event to all attached observers.

    Newly attached observers first receive a replay of the current
    connection state.  Commands from any observer act on the one shared
    session.
    """

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager
        self._observers: set[Observer] = set()
        self._lock = asyncio.Lock()
        manager.subscribe(self.broadcast)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    async def attach(self, observer: Observer) -> None:
        """Register *observer* and replay the pending code or readiness."""
        async with self._lock:
            session = self._manager.session
            if session.last_qr_code:
                await self._send(observer, LifecycleEvent.qr(session.last_qr_code))
            elif session.is_connected:
                await self._send(observer, LifecycleEvent(type="ready"))
            self._observers.add(observer)
        logger.info("Observer attached (total: %d)", len(self._observers))

    async def detach(self, observer: Observer) -> None:
        async with self._lock:
            self._observers.discard(observer)
        logger.info("Observer detached (total: %d)", len(self._observers))

    async def broadcast(self, event: LifecycleEvent) -> None:
        """Send *event* to every observer; failures are logged and skipped."""
        async with self._lock:
            for observer in list(self._observers):
                await self._send(observer, event)

    async def handle_command(self, observer: Observer, raw: str | bytes) -> None:
        """Apply one command frame received from *observer*."""
        try:
            command = parse_command(raw)
        except MalformedCommand as exc:
            logger.warning("Malformed command from observer: %s", exc)
            await self._send(observer, LifecycleEvent.error(str(exc)))
            return

        logger.info("Operator command: %s", command.type)
        try:
            if command.type == "start":
                await self._manager.start()
            elif command.type == "stop":
                await self._manager.stop()
            elif command.type == "reset":
                await self._manager.reset()
            elif command.type == "ping":
                await self._send(observer, LifecycleEvent(type="pong"))
            elif command.type == "getState":
                await self._send(observer, self._manager.get_state())
        except Exception as exc:
            logger.exception("Error applying command %s", command.type)
            await self._send(observer, LifecycleEvent.error(str(exc) or type(exc).__name__))

    async def _send(self, observer: Observer, event: LifecycleEvent) -> None:
        if not observer.is_open:
            logger.debug("Skipping closed observer for %s", event.type)
            return
        try:
            await observer.send_json(event.to_frame())
        except Exception:
            logger.exception("Failed to deliver %s to an observer", event.type)

"""Connection manager — owns the single messaging client and its lifecycle.

Lifecycle
---------
``stopped → initializing → awaiting_auth(code) → connected``

* ``start()`` builds a client through the transport factory and connects.
* ``stop()`` tears it down and forgets every chat.
* ``reset()`` is ``stop()`` + ``start()``; a failing teardown never blocks
  the new start.
* A ``disconnected`` event restarts the client automatically unless the
  account was explicitly logged out.

Transport events are queued and applied one at a time by a pump task.
Lifecycle commands and event handling share one lock, so session state
is never mutated re-entrantly.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Awaitable, Callable

from anm_bot.agents.base import BaseAgent
from anm_bot.errors import DeliverySendFailure
from anm_bot.models.events import LifecycleEvent
from anm_bot.models.session import Session, SessionStatus
from anm_bot.services.conversation import ConversationService, HandoffHook
from anm_bot.services.timers import TimerRegistry
from anm_bot.transport.base import (
    DisconnectReason,
    MessagingTransport,
    TransportEvent,
    TransportEventKind,
)
from anm_bot.transport.factory import TransportFactory

logger = logging.getLogger(__name__)

EventSink = Callable[[LifecycleEvent], Awaitable[None]]


class ConnectionManager:
    """Keeps exactly one transport client consistent with ``Session.status``."""

    def __init__(
        self,
        transport_factory: TransportFactory,
        timers: TimerRegistry,
        agent: BaseAgent | None = None,
        on_handoff: HandoffHook | None = None,
    ) -> None:
        self._factory = transport_factory
        self.session = Session()
        self.conversation = ConversationService(
            send=self.send_message,
            timers=timers,
            agent=agent,
            on_handoff=on_handoff,
        )
        self._lock = asyncio.Lock()
        self._events: asyncio.Queue[tuple[MessagingTransport, TransportEvent]] = asyncio.Queue()
        self._sinks: list[EventSink] = []
        self._pump_task: asyncio.Task | None = None
        self._message_tasks: set[asyncio.Task] = set()

    # ── Wiring ───────────────────────────────────────────

    def subscribe(self, sink: EventSink) -> None:
        """Register a coroutine that receives every lifecycle event."""
        self._sinks.append(sink)

    async def open(self) -> None:
        """Start the event pump.  Call once from the running loop."""
        if self._pump_task is None:
            self._pump_task = asyncio.create_task(self._pump(), name="connection-event-pump")

    async def close(self) -> None:
        """Stop the client and the event pump (application shutdown)."""
        await self.stop()
        if self._pump_task is not None:
            self._pump_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump_task
            self._pump_task = None
        for task in list(self._message_tasks):
            task.cancel()

    # ── Operator commands ────────────────────────────────

    async def start(self) -> bool:
        """Bring a new client up.  No-op unless the session is stopped."""
        async with self._lock:
            return await self._start_locked()

    async def stop(self) -> bool:
        """Tear the client down.  No-op when already stopped."""
        async with self._lock:
            if self.session.status is SessionStatus.STOPPED:
                logger.info("Stop ignored; session already stopped")
                return False
            failure = await self._teardown()
            if failure is not None:
                await self._emit(
                    LifecycleEvent.error(f"Messaging client did not disconnect cleanly: {failure}")
                )
            await self._emit(LifecycleEvent(type="stopped"))
            return True

    async def reset(self) -> bool:
        """Replace the client with a fresh one."""
        async with self._lock:
            if self.session.status is not SessionStatus.STOPPED:
                failure = await self._teardown()
                if failure is not None:
                    logger.warning("Ignoring teardown failure during reset: %s", failure)
                await self._emit(LifecycleEvent(type="stopped"))
            started = await self._start_locked()
            await self._emit(LifecycleEvent(type="reset"))
            return started

    def get_state(self) -> LifecycleEvent:
        """Snapshot of the connection as a single event."""
        if self.session.is_connected:
            return LifecycleEvent(type="ready")
        if self.session.last_qr_code:
            return LifecycleEvent.qr(self.session.last_qr_code)
        return LifecycleEvent.disconnected()

    # ── Messaging capability ─────────────────────────────

    async def send_message(self, to: str, text: str) -> None:
        """Send through the live client.

        Raises ``DeliverySendFailure`` when no client is connected or the
        transport rejects the message.
        """
        client = self.session.client
        if client is None or not self.session.is_connected:
            raise DeliverySendFailure("no connected messaging client")
        if not await client.send_message(to, text):
            raise DeliverySendFailure(f"{client.name} rejected the message")

    def deliver_inbound(self, sender: str, text: str) -> bool:
        """Queue a message that reached us outside the transport (webhook)."""
        client = self.session.client
        if client is None:
            logger.info("No messaging client; inbound message from %s dropped", sender)
            return False
        self._enqueue(client, TransportEvent.message(sender, text))
        return True

    async def drain(self) -> None:
        """Wait until queued events and in-flight messages are processed."""
        await self._events.join()
        while self._message_tasks:
            await asyncio.gather(*list(self._message_tasks), return_exceptions=True)

    # ── Private helpers ──────────────────────────────────

    async def _start_locked(self) -> bool:
        if self.session.status is not SessionStatus.STOPPED:
            logger.info("Start ignored; session is %s", self.session.status.value)
            return False

        self.session.status = SessionStatus.INITIALIZING
        try:
            client = self._factory()
            client.set_listener(functools.partial(self._enqueue, client))
            self.session.client = client
            await client.connect()
        except Exception as exc:
            logger.exception("Failed to start messaging client")
            await self._teardown()
            await self._emit(LifecycleEvent.error(f"Failed to start messaging client: {exc}"))
            return False

        logger.info("Messaging client started (%s)", client.name)
        await self._emit(LifecycleEvent(type="started"))
        return True

    async def _teardown(self) -> Exception | None:
        """Disconnect and forget the client, chats and timers.

        Returns the disconnect failure instead of raising it.
        """
        client = self.session.client
        self.session.client = None
        self.session.last_qr_code = None
        self.session.status = SessionStatus.STOPPED
        self.conversation.clear_all()

        if client is None:
            return None
        client.set_listener(None)
        try:
            await client.disconnect()
        except Exception as exc:
            logger.exception("Error while disconnecting %s", client.name)
            return exc
        logger.info("Messaging client disconnected (%s)", client.name)
        return None

    def _enqueue(self, client: MessagingTransport, event: TransportEvent) -> None:
        self._events.put_nowait((client, event))

    async def _pump(self) -> None:
        while True:
            client, event = await self._events.get()
            try:
                await self._dispatch(client, event)
            except Exception:
                logger.exception("Error handling transport event %s", event.kind.value)
            finally:
                self._events.task_done()

    async def _dispatch(self, client: MessagingTransport, event: TransportEvent) -> None:
        if event.kind is TransportEventKind.MESSAGE:
            self._route_message(client, event)
            return

        reconnect = False
        async with self._lock:
            if client is not self.session.client:
                logger.debug("Ignoring %s from a discarded client", event.kind.value)
                return

            if event.kind is TransportEventKind.AUTH_CODE_ISSUED:
                self.session.last_qr_code = event.code
                self.session.status = SessionStatus.AWAITING_AUTH
                logger.info("Authentication code issued")
                await self._emit(LifecycleEvent.qr(event.code or ""))

            elif event.kind is TransportEventKind.AUTHENTICATED:
                logger.info("Messaging account authenticated")
                await self._emit(LifecycleEvent(type="authenticated"))

            elif event.kind is TransportEventKind.READY:
                self.session.status = SessionStatus.CONNECTED
                self.session.last_qr_code = None
                logger.info("Messaging client ready")
                await self._emit(LifecycleEvent(type="ready"))

            elif event.kind is TransportEventKind.DISCONNECTED:
                reason = event.reason or DisconnectReason.UNKNOWN
                await self._teardown()
                reconnect = reason is not DisconnectReason.LOGGED_OUT
                logger.info("Connection closed (%s); reconnecting: %s", reason.value, reconnect)
                await self._emit(LifecycleEvent.disconnected(reason.value))

        if reconnect:
            await self.start()

    def _route_message(self, client: MessagingTransport, event: TransportEvent) -> None:
        if client is not self.session.client or not self.session.is_connected:
            logger.info("Not connected; inbound message from %s dropped", event.sender)
            return
        if not event.sender or not event.text:
            return
        epoch = self.conversation.epoch
        task = asyncio.create_task(self._handle_message(event.sender, event.text, epoch))
        self._message_tasks.add(task)
        task.add_done_callback(self._message_tasks.discard)

    async def _handle_message(self, sender: str, text: str, epoch: int) -> None:
        logger.info("Message from %s: %s", sender, text[:80])
        try:
            await self.conversation.handle_message(sender, text, epoch)
        except Exception:
            logger.exception("Error handling message from %s", sender)

    async def _emit(self, event: LifecycleEvent) -> None:
        for sink in list(self._sinks):
            try:
                await sink(event)
            except Exception:
                logger.exception("Event sink failed for %s", event.type)

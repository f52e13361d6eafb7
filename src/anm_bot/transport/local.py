"""In-process transport used by the terminal simulator and the test-suite.

It mimics a linked-device account: ``connect()`` issues a pairing code and
the connection only becomes ready once :meth:`pair` is called with it.
"""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Callable
from dataclasses import dataclass

from anm_bot.errors import TransportConstructionError
from anm_bot.transport.base import DisconnectReason, MessagingTransport, TransportEvent

logger = logging.getLogger(__name__)

PAIRING_CODE_LENGTH = 8


@dataclass(frozen=True)
class OutboundMessage:
    to: str
    text: str


class LocalTransport(MessagingTransport):
    """Loopback transport; outbound messages land in :attr:`outbox`."""

    def __init__(
        self,
        on_send: Callable[[OutboundMessage], None] | None = None,
        fail_connect: bool = False,
    ) -> None:
        super().__init__()
        self.outbox: list[OutboundMessage] = []
        self.connected = False
        self.paired = False
        self.pairing_code: str | None = None
        self.fail_sends = False
        self._on_send = on_send
        self._fail_connect = fail_connect

    @property
    def name(self) -> str:
        return "LocalTransport"

    async def connect(self) -> None:
        if self._fail_connect:
            raise TransportConstructionError("Local transport refused to connect")
        self.connected = True
        self.pairing_code = "".join(
            random.choices(string.ascii_uppercase + string.digits, k=PAIRING_CODE_LENGTH)
        )
        logger.info("Pairing code issued: %s", self.pairing_code)
        self.emit(TransportEvent.auth_code(self.pairing_code))

    async def disconnect(self) -> None:
        self.connected = False
        self.paired = False
        self.pairing_code = None

    async def send_message(self, to: str, text: str) -> bool:
        if not self.connected or self.fail_sends:
            return False
        message = OutboundMessage(to=to, text=text)
        self.outbox.append(message)
        if self._on_send is not None:
            self._on_send(message)
        return True

    # ── Simulation hooks ─────────────────────────────────

    def pair(self, code: str | None = None) -> bool:
        """Complete authentication with the pairing code (defaults to the issued one)."""
        if not self.connected or self.pairing_code is None:
            return False
        if code is not None and code != self.pairing_code:
            logger.info("Rejected pairing code %s", code)
            return False
        self.paired = True
        self.pairing_code = None
        self.emit(TransportEvent.authenticated())
        self.emit(TransportEvent.ready())
        return True

    def receive(self, sender: str, text: str) -> None:
        """Inject an inbound message from *sender*."""
        self.emit(TransportEvent.message(sender, text))

    def drop(self, reason: DisconnectReason = DisconnectReason.CONNECTION_LOST) -> None:
        """Simulate the provider closing the connection."""
        self.connected = False
        self.paired = False
        self.emit(TransportEvent.disconnected(reason))

    def sent_to(self, to: str) -> list[str]:
        """Texts delivered to *to*, oldest first."""
        return [m.text for m in self.outbox if m.to == to]

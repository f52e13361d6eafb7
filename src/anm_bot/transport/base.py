"""Base transport — abstract messaging capability every client must implement."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TransportEventKind(str, Enum):
    AUTH_CODE_ISSUED = "auth_code_issued"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    DISCONNECTED = "disconnected"
    MESSAGE = "message"


class DisconnectReason(str, Enum):
    """Why the account connection closed.

    Only ``LOGGED_OUT`` is terminal; every other reason is recoverable.
    """

    LOGGED_OUT = "loggedOut"
    CONNECTION_LOST = "connectionLost"
    CONNECTION_REPLACED = "connectionReplaced"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TransportEvent:
    """Value object emitted on a transport's event stream."""

    kind: TransportEventKind
    code: str | None = None
    reason: DisconnectReason | None = None
    sender: str | None = None
    text: str | None = None

    @classmethod
    def auth_code(cls, code: str) -> TransportEvent:
        return cls(TransportEventKind.AUTH_CODE_ISSUED, code=code)

    @classmethod
    def authenticated(cls) -> TransportEvent:
        return cls(TransportEventKind.AUTHENTICATED)

    @classmethod
    def ready(cls) -> TransportEvent:
        return cls(TransportEventKind.READY)

    @classmethod
    def disconnected(cls, reason: DisconnectReason) -> TransportEvent:
        return cls(TransportEventKind.DISCONNECTED, reason=reason)

    @classmethod
    def message(cls, sender: str, text: str) -> TransportEvent:
        return cls(TransportEventKind.MESSAGE, sender=sender, text=text)


EventListener = Callable[[TransportEvent], None]


class MessagingTransport(ABC):
    """Abstract messaging-account client.

    A transport is single-use: once disconnected it is discarded and a
    fresh instance is built for the next connection.  Events are pushed
    synchronously to the listener installed with :meth:`set_listener`;
    the listener must not block.
    """

    def __init__(self) -> None:
        self._listener: EventListener | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable transport name (used in logs)."""

    def set_listener(self, listener: EventListener | None) -> None:
        self._listener = listener

    def emit(self, event: TransportEvent) -> None:
        """Push *event* to the installed listener, if any."""
        if self._listener is None:
            logger.debug("%s: no listener, dropping %s", self.name, event.kind.value)
            return
        self._listener(event)

    @abstractmethod
    async def connect(self) -> None:
        """Bring the account connection up.

        Raises ``TransportConstructionError`` when the connection cannot be
        established.  Lifecycle progress is reported through events.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Tear the connection down and release resources."""

    @abstractmethod
    async def send_message(self, to: str, text: str) -> bool:
        """Deliver *text* to *to*.  Returns ``True`` on success."""

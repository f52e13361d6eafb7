"""Connection session — the single messaging account's lifecycle state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anm_bot.transport.base import MessagingTransport


class SessionStatus(str, Enum):
    """Lifecycle of the messaging account connection."""

    STOPPED = "stopped"
    INITIALIZING = "initializing"
    AWAITING_AUTH = "awaiting_auth"
    CONNECTED = "connected"


@dataclass
class Session:
    """Process-wide connection state owned by the ``ConnectionManager``.

    ``last_qr_code`` holds the pending authentication code; it is only
    ever set while the session is not connected.
    """

    status: SessionStatus = SessionStatus.STOPPED
    client: MessagingTransport | None = None
    last_qr_code: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.status is SessionStatus.CONNECTED

    @property
    def client_active(self) -> bool:
        return self.client is not None

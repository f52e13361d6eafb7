"""Per-correspondent dialog state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Stage(str, Enum):
    """Dialog stages a correspondent can be in."""

    MENU = "menu"
    SERVICE_DETAIL = "service_detail"
    COMBO_DETAIL = "combo_detail"
    WITH_AGENT = "with_agent"


@dataclass
class ChatState:
    """Represents the current dialog state for one correspondent.

    ``service_id`` is only meaningful while ``stage`` is
    ``Stage.SERVICE_DETAIL``.
    """

    correspondent_id: str
    stage: Stage = Stage.MENU
    service_id: int | None = None
    last_activity_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    warning_issued: bool = False

    @property
    def with_agent(self) -> bool:
        return self.stage is Stage.WITH_AGENT

    def move_to(self, stage: Stage, service_id: int | None = None) -> None:
        """Switch stage; ``service_id`` is dropped for every other stage."""
        self.stage = stage
        self.service_id = service_id if stage is Stage.SERVICE_DETAIL else None

    def touch(self) -> None:
        """Record inbound activity and open a fresh inactivity window."""
        self.last_activity_at = datetime.now(UTC)
        self.warning_issued = False

"""Operator control-channel frames (JSON over the observer WebSocket).

Commands (operator → bot)::

    {"type": "start" | "stop" | "reset" | "ping" | "getState"}

Events (bot → observers)::

    {"type": "qr", "code": "..."}
    {"type": "started"} {"type": "stopped"} {"type": "reset"}
    {"type": "authenticated"} {"type": "ready"} {"type": "pong"}
    {"type": "disconnected", "reason": "..."}
    {"type": "error", "message": "..."}
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from anm_bot.errors import MalformedCommand

CommandType = Literal["start", "stop", "reset", "ping", "getState"]

EventType = Literal[
    "qr",
    "started",
    "stopped",
    "reset",
    "authenticated",
    "ready",
    "disconnected",
    "pong",
    "error",
]


class OperatorCommand(BaseModel):
    type: CommandType


class LifecycleEvent(BaseModel):
    """Normalized event fanned out to observers."""

    type: EventType
    code: str | None = None
    reason: str | None = None
    message: str | None = None

    def to_frame(self) -> dict[str, Any]:
        """JSON-ready dict without the fields that do not apply."""
        return self.model_dump(exclude_none=True)

    # ── Constructors ─────────────────────────────────────

    @classmethod
    def qr(cls, code: str) -> LifecycleEvent:
        return cls(type="qr", code=code)

    @classmethod
    def disconnected(cls, reason: str | None = None) -> LifecycleEvent:
        return cls(type="disconnected", reason=reason)

    @classmethod
    def error(cls, message: str) -> LifecycleEvent:
        return cls(type="error", message=message)


def parse_command(raw: str | bytes) -> OperatorCommand:
    """Decode one command frame.

    Raises ``MalformedCommand`` for invalid JSON, a missing ``type`` or an
    unknown command.
    """
    try:
        return OperatorCommand.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedCommand(_describe(raw, exc)) from exc


def _describe(raw: str | bytes, exc: ValidationError) -> str:
    first = exc.errors()[0]
    if first["type"] == "json_invalid":
        return "Invalid JSON command frame"
    if first["type"] == "literal_error":
        return f"Unknown command type: {first.get('input')!r}"
    if first["type"] == "missing":
        return "Command frame is missing 'type'"
    return f"Malformed command frame: {str(raw)[:80]}"

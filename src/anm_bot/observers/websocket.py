"""Operator WebSocket — attaches each connection to the broadcast hub."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from anm_bot.services.broadcast import BroadcastHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["observers"])


class WebSocketObserver:
    """Adapts a Starlette ``WebSocket`` to the hub's observer interface."""

    def __init__(self, ws: WebSocket) -> None:
        self._ws = ws

    @property
    def is_open(self) -> bool:
        return (
            self._ws.client_state is WebSocketState.CONNECTED
            and self._ws.application_state is WebSocketState.CONNECTED
        )

    async def send_json(self, data: dict[str, Any]) -> None:
        await self._ws.send_json(data)


@router.websocket("/ws")
async def observer_socket(ws: WebSocket) -> None:
    """Operator control channel: JSON commands in, lifecycle events out."""
    hub: BroadcastHub = ws.app.state.hub
    await ws.accept()
    observer = WebSocketObserver(ws)
    await hub.attach(observer)

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            # Commands may arrive as text or binary frames.
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await hub.handle_command(observer, raw)
    except WebSocketDisconnect:
        logger.info("Observer WebSocket disconnected")
    finally:
        await hub.detach(observer)

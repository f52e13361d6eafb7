"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from anm_bot.config import settings
from anm_bot.database.engine import async_session_factory, init_db
from anm_bot.handoffs.router import router as handoffs_router
from anm_bot.observers.websocket import router as observer_router
from anm_bot.services.broadcast import BroadcastHub
from anm_bot.services.connection_manager import ConnectionManager
from anm_bot.services.handoff_service import HandoffService
from anm_bot.services.timers import TimerRegistry
from anm_bot.transport.factory import create_transport_factory
from anm_bot.webhook.handler import router as webhook_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db()
    logger.info("Database initialised")

    handoffs = HandoffService(async_session_factory)
    manager = ConnectionManager(
        transport_factory=create_transport_factory(settings),
        timers=TimerRegistry(settings.warning_delay_seconds, settings.reset_delay_seconds),
        on_handoff=handoffs.record,
    )
    hub = BroadcastHub(manager)
    await manager.open()
    app.state.manager = manager
    app.state.hub = hub

    yield

    logger.info("Shutting down %s …", settings.app_name)
    await manager.close()


app = FastAPI(
    title=settings.app_name,
    description="WhatsApp menu bot with operator control channel and human handoff",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(webhook_router)
app.include_router(observer_router)
app.include_router(handoffs_router)


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return f"{settings.app_name} Server Running"


@app.get("/health")
async def health_check(request: Request):
    """Liveness probe with a read-only view of the connection."""
    manager: ConnectionManager = request.app.state.manager
    hub: BroadcastHub = request.app.state.hub
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "clientActive": manager.session.client_active,
        "observerCount": hub.observer_count,
        "activeChats": manager.conversation.store.active_count,
    }


def run() -> None:
    """Console entry point (``anm-bot``)."""
    uvicorn.run("anm_bot.main:app", host=settings.host, port=settings.port)

"""WhatsApp webhook handler — receives Cloud API messages."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request, Response

from anm_bot.config import settings
from anm_bot.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])


# ──────────────────────────────────────────────────────────────
# GET /webhook — Meta verification challenge
# ──────────────────────────────────────────────────────────────
@router.get("/webhook")
async def verify_webhook(
    hub_mode: str = Query(None, alias="hub.mode"),
    hub_verify_token: str = Query(None, alias="hub.verify_token"),
    hub_challenge: str = Query(None, alias="hub.challenge"),
) -> Response:
    """Respond to the Meta webhook verification challenge."""
    if hub_mode == "subscribe" and hub_verify_token == settings.whatsapp_verify_token:
        logger.info("Webhook verified successfully")
        return Response(content=hub_challenge, media_type="text/plain")
    logger.warning("Webhook verification failed (bad token or mode)")
    return Response(content="Forbidden", status_code=403)


# ──────────────────────────────────────────────────────────────
# POST /webhook — Incoming messages
# ──────────────────────────────────────────────────────────────
@router.post("/webhook")
async def receive_message(request: Request) -> dict:
    """Queue incoming WhatsApp messages for the connection manager.

    Expected payload structure (simplified)::

        {
          "entry": [{
            "changes": [{
              "value": {
                "messages": [{
                  "from": "15551234567",
                  "type": "text",
                  "text": { "body": "Hola" }
                }]
              }
            }]
          }]
        }

    Always answers 200 so Meta does not redeliver; messages that arrive
    while the bot is stopped are dropped.
    """
    manager: ConnectionManager = request.app.state.manager
    body = await request.json()

    try:
        entry = body["entry"][0]
        changes = entry["changes"][0]
        value = changes["value"]
        messages = value.get("messages", [])
    except (KeyError, IndexError, TypeError):
        logger.debug("Received non-message webhook event, ignoring")
        return {"status": "ok"}

    for msg in messages:
        sender_phone = msg.get("from", "")
        text_body = msg.get("text", {}).get("body", "")

        if not sender_phone or not text_body:
            continue

        manager.deliver_inbound(sender_phone, text_body)

    return {"status": "ok"}

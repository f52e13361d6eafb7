"""WhatsApp Cloud API transport — async HTTP client for the Graph API.

The Cloud API has no interactive pairing step: the access token *is* the
credential.  ``connect()`` validates it against the phone-number resource
and reports ``authenticated`` then ``ready``.  Inbound messages are not
polled; Meta pushes them to ``POST /webhook`` which feeds them back into
the connection manager.
"""

from __future__ import annotations

import logging

import httpx

from anm_bot.config import settings
from anm_bot.errors import TransportConstructionError
from anm_bot.transport.base import MessagingTransport, TransportEvent

logger = logging.getLogger(__name__)


class CloudAPITransport(MessagingTransport):
    """Async HTTP wrapper around the WhatsApp Cloud API."""

    def __init__(
        self,
        api_token: str | None = None,
        phone_number_id: str | None = None,
        base_url: str | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._api_token = api_token if api_token is not None else settings.whatsapp_api_token
        self._phone_number_id = (
            phone_number_id if phone_number_id is not None else settings.whatsapp_phone_number_id
        )
        self._base_url = (base_url or settings.whatsapp_api_base_url).rstrip("/")
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "CloudAPITransport"

    # ── Lifecycle ────────────────────────────────────────

    async def connect(self) -> None:
        """Validate the access token and open the HTTP client."""
        if not self._api_token or not self._phone_number_id:
            raise TransportConstructionError(
                "WHATSAPP_API_TOKEN and WHATSAPP_PHONE_NUMBER_ID must be set"
            )

        client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_token}"},
            transport=self._http_transport,
            timeout=10.0,
        )
        try:
            resp = await client.get(f"/{self._phone_number_id}")
        except httpx.HTTPError as exc:
            await client.aclose()
            raise TransportConstructionError(f"Cloud API unreachable: {exc}") from exc

        if resp.status_code != 200:
            await client.aclose()
            logger.error("Token validation failed: %s %s", resp.status_code, resp.text)
            raise TransportConstructionError(
                f"Cloud API rejected credentials ({resp.status_code})"
            )

        self._client = client
        logger.info("Cloud API session open for phone number %s", self._phone_number_id)
        self.emit(TransportEvent.authenticated())
        self.emit(TransportEvent.ready())

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Cloud API session closed")

    # ── Messaging ────────────────────────────────────────

    async def send_message(self, to: str, text: str) -> bool:
        """Send a text message through ``/{phone_number_id}/messages``."""
        if self._client is None:
            logger.warning("Cloud API session not open; reply to %s dropped", to)
            return False

        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": text},
        }
        try:
            resp = await self._client.post(f"/{self._phone_number_id}/messages", json=payload)
        except httpx.HTTPError as exc:
            logger.exception("Send request error for %s: %s", to, exc)
            return False

        if resp.status_code == 200:
            logger.info("Reply sent to %s", to)
            return True
        logger.error("Failed to send reply to %s: %s %s", to, resp.status_code, resp.text)
        return False

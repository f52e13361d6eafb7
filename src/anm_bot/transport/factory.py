"""Transport factory — builds a fresh client for each connection attempt."""

from __future__ import annotations

import logging
from collections.abc import Callable

from anm_bot.config import Settings
from anm_bot.transport.base import MessagingTransport
from anm_bot.transport.cloud_api import CloudAPITransport
from anm_bot.transport.local import LocalTransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], MessagingTransport]


def create_transport_factory(config: Settings) -> TransportFactory:
    """Return a zero-argument factory for the configured transport."""
    if config.transport == "local":
        logger.info("Using local in-process transport")
        return LocalTransport

    def build_cloud_api() -> MessagingTransport:
        return CloudAPITransport(
            api_token=config.whatsapp_api_token,
            phone_number_id=config.whatsapp_phone_number_id,
            base_url=config.whatsapp_api_base_url,
        )

    logger.info("Using WhatsApp Cloud API transport")
    return build_cloud_api

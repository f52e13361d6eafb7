"""Email service — sends handoff alerts to the advisors' inbox via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from anm_bot.config import Settings, settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails using the configured SMTP server."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or settings

    @property
    def enabled(self) -> bool:
        return bool(self._config.smtp_host and self._config.handoff_alert_email)

    async def send_handoff_alert(self, correspondent_id: str, topic: str) -> None:
        """Tell the advisors that a correspondent is waiting for them.

        Parameters
        ----------
        correspondent_id:
            Messaging address of the waiting correspondent.
        topic:
            The service option or combo the correspondent picked.
        """
        if not self.enabled:
            logger.debug("SMTP not configured — handoff alert for %s skipped", correspondent_id)
            return

        cfg = self._config
        msg = EmailMessage()
        msg["Subject"] = f"Nuevo cliente esperando asesor — {topic}"
        msg["From"] = cfg.email_from
        msg["To"] = cfg.handoff_alert_email
        msg.set_content(
            f"El contacto {correspondent_id} pidió hablar con un asesor.\n\n"
            f"Tema: {topic}\n\n"
            f"— {cfg.app_name}"
        )

        logger.info("Sending handoff alert for %s to %s", correspondent_id, cfg.handoff_alert_email)

        await aiosmtplib.send(
            msg,
            hostname=cfg.smtp_host,
            port=cfg.smtp_port,
            username=cfg.smtp_username or None,
            password=cfg.smtp_password or None,
            start_tls=True,
        )

        logger.info("Handoff alert sent for %s", correspondent_id)

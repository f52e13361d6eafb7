"""ANM Bot — configuration loaded from environment."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── App ───────────────────────────────────────────────
    app_name: str = "ANM Bot"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 3000

    # ── Messaging transport ───────────────────────────────
    transport: Literal["cloud_api", "local"] = "cloud_api"

    # ── WhatsApp Cloud API ────────────────────────────────
    whatsapp_verify_token: str = "changeme"
    whatsapp_api_token: str = ""
    whatsapp_phone_number_id: str = ""
    whatsapp_api_base_url: str = "https://graph.facebook.com/v21.0"

    # ── Inactivity policy (seconds) ───────────────────────
    warning_delay_seconds: float = 120.0
    reset_delay_seconds: float = 120.0

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./anm_bot.db"

    # ── Handoff alerts (SMTP) ─────────────────────────────
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "bot@anm.local"
    handoff_alert_email: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()

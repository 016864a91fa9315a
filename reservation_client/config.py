"""Centralized client configuration for all environments."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

BASE_DIR: Final[Path] = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

# Load environment variables once, prioritizing runtime env over file values
load_dotenv(dotenv_path=ENV_PATH, override=False)


def _str_to_bool(value: str | bool | None, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _determine_api_url() -> str:
    """
    Return the GraphQL endpoint using the following precedence:
    1. Explicit API_URL
    2. API_HOST / API_PORT components
    3. Local development server
    """
    explicit_url = os.getenv("API_URL") or os.getenv("EXPO_PUBLIC_API_URL")
    if explicit_url:
        return explicit_url

    host = os.getenv("API_HOST")
    if host:
        port = os.getenv("API_PORT", "8000")
        scheme = os.getenv("API_SCHEME", "http")
        return f"{scheme}://{host}:{port}/graphql"

    return "http://localhost:8000/graphql"


def _determine_session_file() -> Path:
    explicit_path = os.getenv("SESSION_FILE")
    if explicit_path:
        return Path(explicit_path).expanduser()
    return Path.home() / ".reservation_client" / "session.json"


class Config:
    """Default runtime configuration shared across services, pollers, and scripts."""

    # Remote API
    API_URL: Final[str] = _determine_api_url()
    API_TIMEOUT_SECONDS: Final[float] = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
    PRODUCT_CATALOG_LIMIT: Final[int] = int(os.getenv("PRODUCT_CATALOG_LIMIT", "1000"))

    # Local session blob written by the auth flow
    SESSION_FILE: Final[Path] = _determine_session_file()

    # Reservation policy knobs
    CANCEL_WINDOW_MINUTES: Final[int] = int(os.getenv("CANCEL_WINDOW_MINUTES", "20"))
    RECENT_ACTIVITY_HOURS: Final[int] = int(os.getenv("RECENT_ACTIVITY_HOURS", "24"))

    # Notification polling
    CUSTOMER_POLL_INTERVAL_SECONDS: Final[float] = float(os.getenv("CUSTOMER_POLL_INTERVAL_SECONDS", "15"))
    BUSINESS_POLL_INTERVAL_SECONDS: Final[float] = float(os.getenv("BUSINESS_POLL_INTERVAL_SECONDS", "30"))
    ALERT_DURATION_MS: Final[int] = int(os.getenv("ALERT_DURATION_MS", "6000"))
    MAX_ALERTS_PER_USER: Final[int] = int(os.getenv("MAX_ALERTS_PER_USER", "50"))

    # Observability
    STRUCTURED_LOGS_ENABLED: Final[bool] = _str_to_bool(os.getenv("STRUCTURED_LOGS_ENABLED"), default=True)
    LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")
    OBSERVABILITY_ENABLED: Final[bool] = _str_to_bool(os.getenv("OBSERVABILITY_ENABLED"), default=True)

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from reservation_client.config import Config

_context = threading.local()


def bind_log_context(
    user_id: Optional[int] = None,
    role: Optional[str] = None,
    component: Optional[str] = None,
) -> None:
    """Attach session details to every record logged from the current thread."""
    _context.user_id = user_id
    _context.role = role
    _context.component = component


def clear_log_context() -> None:
    bind_log_context()


class SessionContextFilter(logging.Filter):
    """Inject the active session (user, role, poller) into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.user_id = getattr(_context, "user_id", None)
        record.role = getattr(_context, "role", None)
        record.component = getattr(_context, "component", None)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "user_id": getattr(record, "user_id", None),
            "role": getattr(record, "role", None),
            "component": getattr(record, "component", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure global logging once, respecting Config toggles."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level or Config.LOG_LEVEL)

    handler = logging.StreamHandler(sys.stdout)
    if Config.STRUCTURED_LOGS_ENABLED:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler.addFilter(SessionContextFilter())

    # Remove existing handlers to avoid duplicate logs when reconfiguring
    root_logger.handlers = [handler]

    logging.getLogger(__name__).debug("Structured logging configured.")

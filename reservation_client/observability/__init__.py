"""Observability helpers: logging, metrics, and health checks."""

from .logging_config import bind_log_context, clear_log_context, configure_logging
from .metrics import (
    increment_counter,
    set_gauge,
    observe_latency,
    timed,
    record_event,
    get_metrics_snapshot,
)
from .health import check_api_health

__all__ = [
    "bind_log_context",
    "clear_log_context",
    "configure_logging",
    "increment_counter",
    "set_gauge",
    "observe_latency",
    "timed",
    "record_event",
    "get_metrics_snapshot",
    "check_api_health",
]

"""
Notification Service

In-memory alert feed standing in for the app's toast layer. Pollers and the
reservation state containers publish one-shot alerts here; the UI reads the
unread list and marks entries as read.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from reservation_client.config import Config
from reservation_client.observability import increment_counter, record_event


class AlertType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Alert:
    """Represents a single user-facing alert."""
    id: str
    user_id: Optional[int]
    alert_type: AlertType
    title: str
    message: str
    duration_ms: int
    reservation_id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    read: bool = False
    read_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.alert_type.value,
            "title": self.title,
            "message": self.message,
            "duration": self.duration_ms,
            "reservation_id": self.reservation_id,
            "created_at": self.created_at.isoformat(),
            "read": self.read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
        }


AlertListener = Callable[[Alert], None]


class NotificationService:
    """
    Per-user alert store.

    Alerts are kept most-recent-first and trimmed to MAX_ALERTS_PER_USER.
    Listeners (e.g. a UI bridge) are called synchronously for every new alert.
    """

    def __init__(self, config: type[Config] = Config) -> None:
        self.config = config
        self._alerts: Dict[Optional[int], List[Alert]] = defaultdict(list)
        self._listeners: List[AlertListener] = []
        self._counter = 0
        self._lock = Lock()
        self.logger = logging.getLogger(__name__)

    def subscribe(self, listener: AlertListener) -> None:
        self._listeners.append(listener)

    def show(
        self,
        title: str,
        message: str,
        alert_type: AlertType | str = AlertType.INFO,
        user_id: Optional[int] = None,
        reservation_id: Optional[int] = None,
        duration_ms: Optional[int] = None,
    ) -> Alert:
        """
        Publish a new alert.

        Args:
            title: Short title
            message: Full message
            alert_type: success, error, info or warning
            user_id: Recipient; None for the anonymous/local user
            reservation_id: Optional reservation the alert refers to
            duration_ms: Display duration hint for the UI

        Returns:
            The created Alert
        """
        with self._lock:
            self._counter += 1
            alert = Alert(
                id=f"alert_{self._counter}_{int(datetime.now().timestamp())}",
                user_id=user_id,
                alert_type=AlertType(alert_type),
                title=title,
                message=message,
                duration_ms=duration_ms or self.config.ALERT_DURATION_MS,
                reservation_id=reservation_id,
            )
            alerts = self._alerts[user_id]
            alerts.insert(0, alert)
            del alerts[self.config.MAX_ALERTS_PER_USER:]
            listeners = list(self._listeners)

        increment_counter("alerts_shown_total", labels={"type": alert.alert_type.value})
        record_event("alert_shown", {"user_id": user_id, "title": title, "reservation_id": reservation_id})
        self.logger.info("Alert for user %s: %s", user_id, title)

        for listener in listeners:
            try:
                listener(alert)
            except Exception as e:
                self.logger.error("Alert listener failed: %s", e)
        return alert

    def get_alerts(self, user_id: Optional[int], unread_only: bool = False, limit: int = 20) -> List[Alert]:
        alerts = self._alerts.get(user_id, [])
        if unread_only:
            alerts = [a for a in alerts if not a.read]
        return list(alerts[:limit])

    def get_unread_count(self, user_id: Optional[int]) -> int:
        return sum(1 for a in self._alerts.get(user_id, []) if not a.read)

    def mark_all_as_read(self, user_id: Optional[int]) -> int:
        count = 0
        now = datetime.now(timezone.utc)
        for alert in self._alerts.get(user_id, []):
            if not alert.read:
                alert.read = True
                alert.read_at = now
                count += 1
        return count

    def clear(self, user_id: Optional[int]) -> None:
        with self._lock:
            self._alerts.pop(user_id, None)

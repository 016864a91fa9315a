"""
Customer notification poller.

Detects reservation transitions the consumer did not trigger locally (the
business confirming or rejecting) by diffing each poll against the statuses
seen on the previous poll, and keeps the badge counters for recent activity.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from reservation_client.config import Config
from reservation_client.models import Reservation, ReservationStatus, normalize_status
from reservation_client.observability import bind_log_context, increment_counter, record_event, set_gauge
from reservation_client.pollers.ticker import IntervalTicker, Ticker
from reservation_client.services.notification_service import AlertType, NotificationService
from reservation_client.services.reservation_service import ReservationService, utc_now

CONSUMER_ROLE = "CONSUMER"

# status -> (alert type, title, message template)
TRANSITION_ALERTS: Dict[str, Tuple[AlertType, str, str]] = {
    ReservationStatus.CONFIRMED.value: (
        AlertType.SUCCESS,
        "Reservation confirmed!",
        "Your reservation #{id} was confirmed by the business.",
    ),
    ReservationStatus.CANCELLED.value: (
        AlertType.ERROR,
        "Reservation rejected",
        "Your reservation #{id} was rejected by the business.",
    ),
}


class CustomerNotificationPoller:
    """
    Polls the consumer's reservations every CUSTOMER_POLL_INTERVAL_SECONDS.

    `snapshot` maps reservation id to the status seen on the previous tick.
    It survives across ticks and is overwritten, in full, at the end of each
    successful tick, so a transition can alert at most once.
    """

    def __init__(
        self,
        service: ReservationService,
        notifier: NotificationService,
        config: type[Config] = Config,
        clock: Callable[[], datetime] = utc_now,
        ticker: Optional[Ticker] = None,
        snapshot: Optional[Dict[int, str]] = None,
    ) -> None:
        self.service = service
        self.notifier = notifier
        self.config = config
        self.clock = clock
        self.ticker = ticker or IntervalTicker("customer-notifications")
        self.snapshot: Dict[int, str] = snapshot if snapshot is not None else {}
        self.logger = logging.getLogger(__name__)

        self.user_id: Optional[int] = None
        self.role: Optional[str] = None
        self.confirmed_count = 0
        self.rejected_count = 0
        self.has_new_confirmed = False
        self.has_new_rejected = False
        self.loading = False
        self._snapshot_owner: Optional[int] = None
        self._local_transitions: Dict[int, str] = {}
        self._session = 0
        self._session_lock = threading.Lock()

    @property
    def total_count(self) -> int:
        return self.confirmed_count + self.rejected_count

    @property
    def active(self) -> bool:
        return self.user_id is not None and (self.role or "").upper() == CONSUMER_ROLE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, user_id: int, role: str) -> bool:
        """Begin polling for a consumer; any other role just resets the counters."""
        self.stop()
        if (role or "").upper() != CONSUMER_ROLE:
            self.logger.debug("Customer poller not started for role %s", role)
            return False

        with self._session_lock:
            self._session += 1
            if user_id != self._snapshot_owner:
                self.snapshot.clear()
                self._local_transitions.clear()
                self._snapshot_owner = user_id
            self.user_id = user_id
            self.role = role
        self.ticker.start(self.config.CUSTOMER_POLL_INTERVAL_SECONDS, self.tick)
        return True

    def stop(self) -> None:
        """Stop polling; a tick still in flight will find its session gone and discard its result."""
        self.ticker.stop()
        with self._session_lock:
            self._session += 1
            self.user_id = None
            self.role = None
        self._reset()

    def mark_as_read(self) -> None:
        """Clear the "new" flags; counts stay until the recency window ages them out."""
        self.has_new_confirmed = False
        self.has_new_rejected = False

    def note_local_transition(self, reservation_id: int, status: str) -> None:
        """
        Record a status change this client made itself (e.g. the consumer's own
        cancel) so the next tick does not report it as a business action.
        """
        status = normalize_status(status)
        with self._session_lock:
            if self.user_id is None:
                return
            self.snapshot[reservation_id] = status
            self._local_transitions[reservation_id] = status

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self) -> None:
        if not self.active:
            self._reset()
            return

        with self._session_lock:
            session = self._session
            user_id = self.user_id
        bind_log_context(user_id=user_id, role=CONSUMER_ROLE, component="customer-poller")

        self.loading = True
        try:
            reservations = self.service.list_mine()
        except Exception as e:
            self.logger.error("Error refreshing customer notifications: %s", e)
            increment_counter("poll_ticks_total", labels={"poller": "customer", "outcome": "error"})
            if self._is_current(session):
                self.confirmed_count = 0
                self.rejected_count = 0
                self.loading = False
            return

        if not self._is_current(session):
            self.logger.debug("Discarding customer poll result from a stopped session")
            return

        confirmed, rejected, transitions = self.evaluate(reservations, self.snapshot, self.clock())
        self._replace_snapshot(reservations)

        self.confirmed_count = confirmed
        self.rejected_count = rejected
        self.loading = False
        increment_counter("poll_ticks_total", labels={"poller": "customer", "outcome": "ok"})
        set_gauge("customer_recent_updates", confirmed + rejected, labels={"user_id": str(user_id)})

        for reservation in transitions:
            self._raise_alert(reservation, user_id)

    refresh = tick

    def evaluate(
        self,
        reservations: List[Reservation],
        previous: Dict[int, str],
        now: datetime,
    ) -> Tuple[int, int, List[Reservation]]:
        """
        Pure part of a tick.

        Returns the recent confirmed count, the recent rejected count, and the
        reservations that moved out of PENDING since `previous` was taken.
        """
        cutoff = now - timedelta(hours=self.config.RECENT_ACTIVITY_HOURS)
        confirmed = 0
        rejected = 0
        transitions: List[Reservation] = []

        for reservation in reservations:
            last_change = reservation.updated_at or reservation.cancelled_at or reservation.created_at
            recent = last_change is not None and last_change >= cutoff

            if reservation.status == ReservationStatus.CONFIRMED and recent:
                confirmed += 1
            elif reservation.status == ReservationStatus.CANCELLED and recent:
                rejected += 1

            if (
                previous.get(reservation.id) == ReservationStatus.PENDING.value
                and reservation.status in TRANSITION_ALERTS
            ):
                transitions.append(reservation)

        return confirmed, rejected, transitions

    def _raise_alert(self, reservation: Reservation, user_id: Optional[int]) -> None:
        alert_type, title, template = TRANSITION_ALERTS[reservation.status]
        if reservation.status == ReservationStatus.CONFIRMED:
            self.has_new_confirmed = True
        else:
            self.has_new_rejected = True
        record_event(
            "reservation_transition_detected",
            {"reservation_id": reservation.id, "new_status": reservation.status},
        )
        self.notifier.show(
            title=title,
            message=template.format(id=reservation.id),
            alert_type=alert_type,
            user_id=user_id,
            reservation_id=reservation.id,
            duration_ms=self.config.ALERT_DURATION_MS,
        )

    def _replace_snapshot(self, reservations: List[Reservation]) -> None:
        """Overwrite the snapshot; a local change wins until the server reports the same status."""
        with self._session_lock:
            self.snapshot.clear()
            for reservation in reservations:
                local = self._local_transitions.get(reservation.id)
                if local == reservation.status:
                    del self._local_transitions[reservation.id]
                self.snapshot[reservation.id] = local or reservation.status

    def _is_current(self, session: int) -> bool:
        with self._session_lock:
            return session == self._session

    def _reset(self) -> None:
        self.confirmed_count = 0
        self.rejected_count = 0
        self.has_new_confirmed = False
        self.has_new_rejected = False
        self.loading = False

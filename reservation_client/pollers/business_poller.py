"""Business notification poller: pending-reservation badge counts for every owned business."""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from reservation_client.config import Config
from reservation_client.models import ReservationStatus
from reservation_client.observability import bind_log_context, increment_counter, set_gauge
from reservation_client.pollers.ticker import IntervalTicker, Ticker
from reservation_client.services.catalog_service import CatalogService
from reservation_client.services.reservation_service import ReservationService

BUSINESS_ROLE = "BUSINESS"


class BusinessNotificationPoller:
    """
    Polls every BUSINESS_POLL_INTERVAL_SECONDS and reports absolute counts.

    No diffing and no alerts: only `pending_count` and `pending_by_business`
    are updated. A failure for one business counts that business as zero and
    does not stop the others.
    """

    def __init__(
        self,
        service: ReservationService,
        catalog: CatalogService,
        config: type[Config] = Config,
        ticker: Optional[Ticker] = None,
    ) -> None:
        self.service = service
        self.catalog = catalog
        self.config = config
        self.ticker = ticker or IntervalTicker("business-notifications")
        self.logger = logging.getLogger(__name__)

        self.user_id: Optional[int] = None
        self.role: Optional[str] = None
        self.pending_count = 0
        self.pending_by_business: Dict[int, int] = {}
        self.loading = False
        self._session = 0
        self._session_lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self.user_id is not None and (self.role or "").upper() == BUSINESS_ROLE

    def start(self, user_id: int, role: str) -> bool:
        self.stop()
        if (role or "").upper() != BUSINESS_ROLE:
            self.logger.debug("Business poller not started for role %s", role)
            return False
        with self._session_lock:
            self._session += 1
            self.user_id = user_id
            self.role = role
        self.ticker.start(self.config.BUSINESS_POLL_INTERVAL_SECONDS, self.refresh_pending_count)
        return True

    def stop(self) -> None:
        self.ticker.stop()
        with self._session_lock:
            self._session += 1
            self.user_id = None
            self.role = None
        self._reset()

    def refresh_pending_count(self) -> None:
        """One poll tick. Never raises."""
        if not self.active:
            self._reset()
            return

        with self._session_lock:
            session = self._session
            user_id = self.user_id
        bind_log_context(user_id=user_id, role=BUSINESS_ROLE, component="business-poller")

        self.loading = True
        try:
            counts = self._collect_counts(user_id)
        except Exception as e:
            self.logger.error("Error refreshing pending count: %s", e)
            increment_counter("poll_ticks_total", labels={"poller": "business", "outcome": "error"})
            counts = {}

        if not self._is_current(session):
            self.logger.debug("Discarding business poll result from a stopped session")
            return

        self.pending_by_business = counts
        self.pending_count = sum(counts.values())
        self.loading = False
        set_gauge("pending_reservations", self.pending_count, labels={"user_id": str(user_id)})

    tick = refresh_pending_count

    def _collect_counts(self, user_id: int) -> Dict[int, int]:
        businesses = self.catalog.get_businesses_by_owner(user_id)
        if not businesses:
            increment_counter("poll_ticks_total", labels={"poller": "business", "outcome": "no_businesses"})
            return {}

        counts: Dict[int, int] = {}
        for business in businesses:
            try:
                reservations = self.service.list_for_business(
                    business.id,
                    ReservationStatus.PENDING,
                    enrich=False,
                )
                counts[business.id] = len(reservations)
            except Exception as e:
                self.logger.error("Error loading reservations for business %d: %s", business.id, e)
                increment_counter("business_poll_failures_total", labels={"business_id": str(business.id)})
                counts[business.id] = 0

        increment_counter("poll_ticks_total", labels={"poller": "business", "outcome": "ok"})
        return counts

    def _is_current(self, session: int) -> bool:
        with self._session_lock:
            return session == self._session

    def _reset(self) -> None:
        self.pending_count = 0
        self.pending_by_business = {}
        self.loading = False

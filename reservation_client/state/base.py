from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from reservation_client.errors import ReservationClientError
from reservation_client.models import Reservation, ReservationStatus
from reservation_client.services.notification_service import AlertType, NotificationService
from reservation_client.services.reservation_service import ReservationService
from reservation_client.state.transitions import (
    TIMESTAMP_FIELDS,
    InvalidTransition,
    apply_transition,
    replace_entry,
)


def error_message(error: Exception, fallback: str) -> str:
    if isinstance(error, ReservationClientError):
        return error.message
    return fallback


class ReservationListState:
    """
    Observable reservation list shared by the consumer and business containers.

    Holds `reservations`, `loading`, `refreshing` and `error`. Fetches are
    tagged with a generation number so a response from a superseded fetch is
    dropped instead of overwriting newer data.
    """

    def __init__(
        self,
        service: ReservationService,
        notifier: Optional[NotificationService] = None,
        user_id: Optional[int] = None,
    ) -> None:
        self.service = service
        self.notifier = notifier
        self.user_id = user_id
        self.reservations: List[Reservation] = []
        self.loading = False
        self.refreshing = False
        self.error: Optional[str] = None
        self._generation = 0
        self._generation_lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__module__)

    def find(self, reservation_id: int) -> Optional[Reservation]:
        return next((r for r in self.reservations if r.id == reservation_id), None)

    def _next_generation(self) -> int:
        with self._generation_lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._generation_lock:
            return generation == self._generation

    def _load_into_state(
        self,
        fetch: Callable[[], List[Reservation]],
        flag: str,
        failure_message: str,
        alert_on_error: bool = False,
    ) -> bool:
        """Run `fetch` with `flag` ("loading" or "refreshing") raised; replace the list on success."""
        generation = self._next_generation()
        setattr(self, flag, True)
        self.error = None
        try:
            data = fetch()
        except Exception as e:
            if not self._is_current(generation):
                return False
            if not isinstance(e, ReservationClientError):
                self.logger.exception("Unexpected error loading reservations")
            message = error_message(e, failure_message)
            self.error = message
            self.logger.error("%s: %s", failure_message, message)
            if alert_on_error:
                self._alert("Error", message, AlertType.ERROR)
            return False
        finally:
            if self._is_current(generation):
                setattr(self, flag, False)

        if not self._is_current(generation):
            self.logger.debug("Discarding stale reservation response (generation %d)", generation)
            return False
        self.reservations = data
        return True

    def _patch(
        self,
        reservation_id: int,
        new_status: ReservationStatus,
        server_copy: Optional[Reservation],
        fallback_time: datetime,
    ) -> None:
        """Apply the optimistic patch; fall back to the server's copy if the local entry disagrees."""
        field_name = TIMESTAMP_FIELDS.get(new_status)
        at = fallback_time
        if server_copy is not None and field_name is not None:
            at = getattr(server_copy, field_name) or fallback_time
        try:
            self.reservations = apply_transition(self.reservations, reservation_id, new_status, field_name, at)
        except InvalidTransition as e:
            self.logger.warning("%s; using server copy", e)
            if server_copy is not None:
                self.reservations = replace_entry(self.reservations, server_copy)

    def _alert(self, title: str, message: str, alert_type: AlertType, reservation_id: Optional[int] = None) -> None:
        if self.notifier is None:
            return
        self.notifier.show(
            title=title,
            message=message,
            alert_type=alert_type,
            user_id=self.user_id,
            reservation_id=reservation_id,
        )

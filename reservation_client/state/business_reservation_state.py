"""Business-side reservation state container, scoped to one business."""
from __future__ import annotations

from typing import Callable, Optional

from reservation_client.models import Reservation, ReservationStatus
from reservation_client.services.notification_service import AlertType, NotificationService
from reservation_client.services.reservation_service import ReservationService
from reservation_client.state.base import ReservationListState, error_message


class BusinessReservationState(ReservationListState):
    """
    Reservations of a single business with the business actions.

    `reject` goes through the same cancel mutation a consumer uses; the API
    does not record who cancelled, so a rejected reservation looks exactly
    like a self-cancelled one afterwards.
    """

    def __init__(
        self,
        service: ReservationService,
        business_id: Optional[int],
        notifier: Optional[NotificationService] = None,
        user_id: Optional[int] = None,
    ) -> None:
        super().__init__(service, notifier=notifier, user_id=user_id)
        self.business_id = business_id
        self._last_status: Optional[ReservationStatus | str] = None

    def load(self, status: Optional[ReservationStatus | str] = None) -> bool:
        if not self.business_id:
            self.error = "No business ID provided"
            return False
        self._last_status = status
        business_id = self.business_id
        return self._load_into_state(
            lambda: self.service.list_for_business(business_id, status),
            "loading",
            "Failed to load reservations",
            alert_on_error=True,
        )

    def refresh(self) -> bool:
        """Reload with the last used status filter."""
        if not self.business_id:
            self.error = "No business ID provided"
            return False
        business_id = self.business_id
        status = self._last_status
        return self._load_into_state(
            lambda: self.service.list_for_business(business_id, status),
            "refreshing",
            "Failed to refresh reservations",
            alert_on_error=True,
        )

    def confirm(self, reservation_id: int) -> bool:
        return self._apply(reservation_id, ReservationStatus.CONFIRMED, self.service.confirm, "confirm")

    def reject(self, reservation_id: int) -> bool:
        return self._apply(reservation_id, ReservationStatus.CANCELLED, self.service.cancel, "reject")

    def complete(self, reservation_id: int) -> bool:
        return self._apply(reservation_id, ReservationStatus.PICKED_UP, self.service.mark_picked_up, "complete")

    @property
    def pending(self) -> list[Reservation]:
        return [r for r in self.reservations if r.status == ReservationStatus.PENDING]

    def _apply(
        self,
        reservation_id: int,
        new_status: ReservationStatus,
        call: Callable[[int], Reservation],
        action: str,
    ) -> bool:
        self.error = None
        try:
            server_copy = call(reservation_id)
        except Exception as e:
            message = error_message(e, f"Failed to {action} reservation")
            self.logger.error("Error on %s for reservation %d: %s", action, reservation_id, message)
            self.error = message
            self._alert("Error", message, AlertType.ERROR, reservation_id)
            return False

        self._patch(reservation_id, new_status, server_copy, self.service.clock())
        return True

"""Consumer-facing reservation state container."""
from __future__ import annotations

from typing import Callable, Optional, Tuple

from reservation_client.models import CancelBlockReason, Reservation, ReservationStatus
from reservation_client.services.notification_service import AlertType, NotificationService
from reservation_client.services.reservation_service import ReservationService
from reservation_client.state.base import ReservationListState, error_message

# (title, message) -> True when the user confirms
Prompter = Callable[[str, str], bool]
# (reservation id, new status) after a change this client made itself
LocalTransitionHook = Callable[[int, str], None]


def always_confirm(title: str, message: str) -> bool:
    return True


CANCEL_BLOCK_MESSAGES = {
    CancelBlockReason.EXPIRED_WINDOW: "The cancellation window for this reservation has expired.",
    CancelBlockReason.WRONG_STATUS: "Only pending reservations can be cancelled.",
    CancelBlockReason.UNKNOWN_AGE: "This reservation has no creation time, so it cannot be cancelled here.",
}


class ReservationState(ReservationListState):
    """
    The consumer's reservation list plus the actions a screen can trigger.

    Every action returns a success flag; failures are stored in `error` and
    surfaced as alerts instead of being raised.
    """

    def __init__(
        self,
        service: ReservationService,
        notifier: Optional[NotificationService] = None,
        prompter: Prompter = always_confirm,
        user_id: Optional[int] = None,
        on_local_transition: Optional[LocalTransitionHook] = None,
    ) -> None:
        super().__init__(service, notifier=notifier, user_id=user_id)
        self.prompter = prompter
        self.on_local_transition = on_local_transition

    def fetch_mine(self, status: Optional[ReservationStatus | str] = None) -> bool:
        return self._load_into_state(
            lambda: self.service.list_mine(status),
            "loading",
            "Failed to load reservations",
        )

    def refresh(self, status: Optional[ReservationStatus | str] = None) -> bool:
        """Pull-to-refresh: the current list stays visible while `refreshing` is set."""
        return self._load_into_state(
            lambda: self.service.list_mine(status),
            "refreshing",
            "Failed to refresh reservations",
        )

    def fetch_for_business(self, business_id: int, status: Optional[ReservationStatus | str] = None) -> bool:
        return self._load_into_state(
            lambda: self.service.list_for_business(business_id, status),
            "loading",
            "Failed to load business reservations",
        )

    def create(self, product_id: int, business_id: int, quantity: int) -> Optional[Reservation]:
        self.loading = True
        self.error = None
        try:
            reservation = self.service.create(product_id, business_id, quantity)
        except Exception as e:
            message = error_message(e, "Failed to create reservation")
            self.error = message
            self._alert("Error", message, AlertType.ERROR)
            return None
        finally:
            self.loading = False

        self._alert(
            "Reservation created",
            "Your reservation was created. The business still has to confirm it.",
            AlertType.SUCCESS,
            reservation.id,
        )
        return reservation

    def get_by_id(self, reservation_id: int) -> Optional[Reservation]:
        self.loading = True
        self.error = None
        try:
            return self.service.get_by_id(reservation_id)
        except Exception as e:
            self.error = error_message(e, "Failed to load reservation")
            return None
        finally:
            self.loading = False

    def cancel(self, reservation_id: int) -> bool:
        """
        Cancel after asking the user.

        Eligibility is evaluated against the in-memory copy before anything is
        sent; an ineligible reservation is refused without a network call.
        """
        reservation = self.find(reservation_id)
        if reservation is None:
            self._alert("Error", "Reservation not found", AlertType.ERROR, reservation_id)
            return False

        eligibility = self.service.cancel_eligibility(reservation)
        if not eligibility.eligible:
            self.logger.info("Refusing to cancel reservation %d: %s", reservation_id, eligibility.reason)
            self._alert(
                "Cannot cancel",
                CANCEL_BLOCK_MESSAGES.get(eligibility.reason, "This reservation cannot be cancelled."),
                AlertType.WARNING,
                reservation_id,
            )
            return False

        if not self.prompter("Cancel reservation", "Are you sure you want to cancel this reservation?"):
            return False

        self.loading = True
        try:
            server_copy = self.service.cancel(reservation_id)
        except Exception as e:
            self._alert("Error", error_message(e, "Failed to cancel reservation"), AlertType.ERROR, reservation_id)
            return False
        finally:
            self.loading = False

        self._patch(reservation_id, ReservationStatus.CANCELLED, server_copy, self.service.clock())
        self._notify_local_transition(reservation_id, ReservationStatus.CANCELLED)
        self._alert(
            "Reservation cancelled",
            "Your reservation was cancelled.",
            AlertType.SUCCESS,
            reservation_id,
        )
        return True

    def confirm(self, reservation_id: int) -> bool:
        return self._transition(
            reservation_id,
            ReservationStatus.CONFIRMED,
            self.service.confirm,
            ("Reservation confirmed", "The reservation was confirmed."),
            "Failed to confirm reservation",
        )

    def mark_picked_up(self, reservation_id: int) -> bool:
        return self._transition(
            reservation_id,
            ReservationStatus.PICKED_UP,
            self.service.mark_picked_up,
            ("Product picked up", "The reservation was marked as picked up."),
            "Failed to mark as picked up",
        )

    def _transition(
        self,
        reservation_id: int,
        new_status: ReservationStatus,
        call: Callable[[int], Reservation],
        success_alert: Tuple[str, str],
        failure_message: str,
    ) -> bool:
        self.loading = True
        self.error = None
        try:
            server_copy = call(reservation_id)
        except Exception as e:
            message = error_message(e, failure_message)
            self.error = message
            self._alert("Error", message, AlertType.ERROR, reservation_id)
            return False
        finally:
            self.loading = False

        self._patch(reservation_id, new_status, server_copy, self.service.clock())
        self._notify_local_transition(reservation_id, new_status)
        self._alert(success_alert[0], success_alert[1], AlertType.SUCCESS, reservation_id)
        return True

    def _notify_local_transition(self, reservation_id: int, new_status: ReservationStatus) -> None:
        if self.on_local_transition is None:
            return
        try:
            self.on_local_transition(reservation_id, new_status.value)
        except Exception as e:
            self.logger.error("Local transition hook failed for reservation %d: %s", reservation_id, e)

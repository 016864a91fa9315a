"""
Reservation transport client.

Translates reservation intents into remote calls and owns the client-only
derived computations: status normalization, the consumer cancellation
window and expiry checks. The remote API stays authoritative for every
business rule; the local checks here are a UX gate only.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from reservation_client.config import Config
from reservation_client.errors import TransportError, ValidationError
from reservation_client.graphql_client import GraphQLClient
from reservation_client.models import (
    CancelBlockReason,
    CancelEligibility,
    Reservation,
    ReservationStatus,
    normalize_status,
)
from reservation_client.observability import increment_counter, record_event
from reservation_client.queries import (
    CANCEL_RESERVATION,
    CREATE_RESERVATION,
    GET_BUSINESS_RESERVATIONS,
    GET_MY_RESERVATIONS,
    MARK_AS_PICKED_UP,
    UPDATE_RESERVATION_STATUS,
)
from reservation_client.services.catalog_service import CatalogService
from reservation_client.services.enrichment import join_reservations
from reservation_client.session import SessionStore

Clock = Callable[[], datetime]

STATUS_COLORS: Dict[str, str] = {
    "PENDING": "#B5A78E",
    "CONFIRMED": "#794646",
    "PICKED_UP": "#EBE5EB",
    "CANCELLED": "#D2C0C0",
    "EXPIRED": "#E5E5E5",
}
DEFAULT_STATUS_COLOR = "#E5E5E5"

STATUS_LABELS: Dict[str, str] = {
    "PENDING": "Pending",
    "CONFIRMED": "Confirmed",
    "PICKED_UP": "Picked up",
    "CANCELLED": "Cancelled",
    "EXPIRED": "Expired",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def minutes_since(moment: datetime, now: datetime) -> float:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (now - moment).total_seconds() / 60.0


def cancel_eligibility(
    reservation: Reservation,
    now: Optional[datetime] = None,
    window_minutes: int = Config.CANCEL_WINDOW_MINUTES,
) -> CancelEligibility:
    """
    Decide whether the consumer may cancel, checking status and window together.

    A reservation is cancellable while it is PENDING and strictly less than
    `window_minutes` have passed since creation. `minutes_left` is reported
    regardless of status so the UI can show a countdown. Without a creation
    time there is no window to measure, so the reservation is not cancellable.
    """
    now = now or utc_now()
    if reservation.created_at is None:
        if reservation.status != ReservationStatus.PENDING:
            return CancelEligibility(False, 0, CancelBlockReason.WRONG_STATUS)
        return CancelEligibility(False, 0, CancelBlockReason.UNKNOWN_AGE)
    elapsed = minutes_since(reservation.created_at, now)
    minutes_left = max(0, math.floor(window_minutes - elapsed))

    if reservation.status != ReservationStatus.PENDING:
        return CancelEligibility(False, minutes_left, CancelBlockReason.WRONG_STATUS)
    if elapsed >= window_minutes:
        return CancelEligibility(False, 0, CancelBlockReason.EXPIRED_WINDOW)
    return CancelEligibility(True, minutes_left)


def status_color(status: ReservationStatus | str) -> str:
    return STATUS_COLORS.get(normalize_status(status), DEFAULT_STATUS_COLOR)


def status_label(status: ReservationStatus | str) -> str:
    return STATUS_LABELS.get(normalize_status(status), str(status))


def _backend_status(status: Optional[ReservationStatus | str]) -> Optional[str]:
    if status is None or status == "":
        return None
    return normalize_status(status).lower()


class ReservationService:
    """Service class for every reservation operation the client issues."""

    def __init__(
        self,
        client: GraphQLClient,
        session_store: SessionStore,
        catalog_service: Optional[CatalogService] = None,
        config: type[Config] = Config,
        clock: Clock = utc_now,
    ) -> None:
        self.client = client
        self.session_store = session_store
        self.config = config
        self.catalog = catalog_service or CatalogService(client, config=config)
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Consumer flows
    # ------------------------------------------------------------------
    def create(self, product_id: int, business_id: int, quantity: int) -> Reservation:
        """Reserve `quantity` units; stock is checked by the server."""
        if quantity is None or int(quantity) <= 0:
            raise ValidationError("Quantity must be a positive number")
        token = self.session_store.require_token()
        data = self.client.execute(
            CREATE_RESERVATION,
            {
                "businessId": business_id,
                "productId": product_id,
                "quantity": int(quantity),
                "token": token,
            },
            operation="createReservation",
        )
        reservation = self._single(data, "createReservation", "Failed to create reservation")
        if reservation.business_id is None:
            reservation.business_id = business_id
        increment_counter("reservations_created_total")
        record_event(
            "reservation_created",
            {"reservation_id": reservation.id, "product_id": product_id, "business_id": business_id},
        )
        self.logger.info("Created reservation %d for product %d", reservation.id, product_id)
        return reservation

    def list_mine(self, status: Optional[ReservationStatus | str] = None) -> List[Reservation]:
        """
        Fetch the consumer's reservations joined with the product catalog.

        A failing catalog fetch degrades to unenriched reservations.
        """
        reservations = self._fetch_mine(status)
        if not reservations:
            return []

        try:
            products = self.catalog.get_all_products(limit=self.config.PRODUCT_CATALOG_LIMIT, offset=0)
        except Exception as e:
            self.logger.warning("Product catalog unavailable, returning reservations without products: %s", e)
            increment_counter("enrichment_failures_total", labels={"operation": "list_mine"})
            return reservations
        return join_reservations(reservations, products)

    def get_by_id(self, reservation_id: int) -> Reservation:
        """
        Find one of the consumer's reservations.

        There is no single-item endpoint, so the full list is fetched and
        filtered locally, then joined product -> business.
        """
        reservation = next((r for r in self._fetch_mine(None) if r.id == reservation_id), None)
        if reservation is None:
            raise ValidationError("Reservation not found")

        try:
            products = self.catalog.get_all_products(limit=self.config.PRODUCT_CATALOG_LIMIT, offset=0)
            businesses = self.catalog.get_all_businesses()
        except Exception as e:
            self.logger.warning("Catalog unavailable for reservation %d: %s", reservation_id, e)
            increment_counter("enrichment_failures_total", labels={"operation": "get_by_id"})
            return reservation
        return join_reservations([reservation], products, businesses)[0]

    def cancel(self, reservation_id: int) -> Reservation:
        token = self.session_store.require_token()
        data = self.client.execute(
            CANCEL_RESERVATION,
            {"reservationId": reservation_id, "token": token},
            operation="cancelReservation",
        )
        reservation = self._single(data, "cancelReservation", "Failed to cancel reservation")
        self._record_transition(reservation_id, ReservationStatus.CANCELLED)
        return reservation

    # ------------------------------------------------------------------
    # Business flows
    # ------------------------------------------------------------------
    def confirm(self, reservation_id: int) -> Reservation:
        token = self.session_store.require_token()
        data = self.client.execute(
            UPDATE_RESERVATION_STATUS,
            {
                "reservationId": reservation_id,
                "token": token,
                "status": ReservationStatus.CONFIRMED.to_backend(),
            },
            operation="updateReservationStatus",
        )
        reservation = self._single(data, "updateReservationStatus", "Failed to confirm reservation")
        self._record_transition(reservation_id, ReservationStatus.CONFIRMED)
        return reservation

    def mark_picked_up(self, reservation_id: int) -> Reservation:
        token = self.session_store.require_token()
        data = self.client.execute(
            MARK_AS_PICKED_UP,
            {"reservationId": reservation_id, "token": token},
            operation="markReservationPickedUp",
        )
        reservation = self._single(data, "markReservationPickedUp", "Failed to mark as picked up")
        self._record_transition(reservation_id, ReservationStatus.PICKED_UP)
        return reservation

    def list_for_business(
        self,
        business_id: int,
        status: Optional[ReservationStatus | str] = None,
        enrich: bool = True,
    ) -> List[Reservation]:
        """Reservations of one business, joined with that business's products only."""
        token = self.session_store.require_token()
        data = self.client.execute(
            GET_BUSINESS_RESERVATIONS,
            {"businessId": business_id, "token": token, "status": _backend_status(status)},
            operation="getBusinessReservations",
        )
        reservations = [self._with_business(r, business_id) for r in self._many(data, "getBusinessReservations")]
        if not reservations or not enrich:
            return reservations

        try:
            products = self.catalog.get_products_by_business(business_id)
        except Exception as e:
            self.logger.error("Error fetching products for business %d reservations: %s", business_id, e)
            increment_counter("enrichment_failures_total", labels={"operation": "list_for_business"})
            return reservations

        if not products:
            self.logger.warning("No products found for business %d", business_id)
            return reservations
        return join_reservations(reservations, products)

    # ------------------------------------------------------------------
    # Derived computations
    # ------------------------------------------------------------------
    def cancel_eligibility(self, reservation: Reservation, now: Optional[datetime] = None) -> CancelEligibility:
        return cancel_eligibility(
            reservation,
            now or self.clock(),
            window_minutes=self.config.CANCEL_WINDOW_MINUTES,
        )

    def can_cancel(self, reservation: Reservation, now: Optional[datetime] = None) -> bool:
        return self.cancel_eligibility(reservation, now).eligible

    def minutes_left_to_cancel(self, reservation: Reservation, now: Optional[datetime] = None) -> int:
        """Minutes left in the window; not gated by status (see cancel_eligibility)."""
        return self.cancel_eligibility(reservation, now).minutes_left

    def is_expired(self, reservation: Reservation, now: Optional[datetime] = None) -> bool:
        if reservation.expires_at is None:
            return False
        return (now or self.clock()) > reservation.expires_at

    status_color = staticmethod(status_color)
    status_label = staticmethod(status_label)
    normalize_status = staticmethod(normalize_status)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _fetch_mine(self, status: Optional[ReservationStatus | str]) -> List[Reservation]:
        token = self.session_store.require_token()
        data = self.client.execute(
            GET_MY_RESERVATIONS,
            {"token": token, "status": _backend_status(status)},
            operation="getMyReservations",
        )
        return self._many(data, "getMyReservations")

    def _many(self, data: Dict[str, Any], key: str) -> List[Reservation]:
        items = data.get(key) if data else None
        if not isinstance(items, list):
            return []
        try:
            return [Reservation.from_dict(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error("Malformed reservation payload in %s: %s", key, e)
            raise TransportError("Malformed response from server") from e

    def _single(self, data: Dict[str, Any], key: str, failure_message: str) -> Reservation:
        item = data.get(key) if data else None
        if not item:
            raise TransportError(failure_message)
        try:
            return Reservation.from_dict(item)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error("Malformed reservation payload in %s: %s", key, e)
            raise TransportError(failure_message) from e

    @staticmethod
    def _with_business(reservation: Reservation, business_id: int) -> Reservation:
        if reservation.business_id is None:
            reservation.business_id = business_id
        return reservation

    def _record_transition(self, reservation_id: int, new_status: ReservationStatus) -> None:
        increment_counter("reservation_transitions_total", labels={"to_status": new_status.value})
        record_event(
            "reservation_status_changed",
            {"reservation_id": reservation_id, "new_status": new_status.value},
        )
        self.logger.info("Reservation %d moved to %s", reservation_id, new_status.value)

"""Optimistic local patches applied after a successful mutation, without a refetch."""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from reservation_client.models import Reservation, ReservationStatus, parse_status

ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED, ReservationStatus.EXPIRED}
    ),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.PICKED_UP}),
}

TIMESTAMP_FIELDS: Dict[ReservationStatus, str] = {
    ReservationStatus.CANCELLED: "cancelled_at",
    ReservationStatus.PICKED_UP: "picked_up_at",
}
_TERMINAL_TIMESTAMP_FIELDS = ("cancelled_at", "picked_up_at")


class InvalidTransition(ValueError):
    pass


def can_transition(current: ReservationStatus | str, new_status: ReservationStatus | str) -> bool:
    source = parse_status(current)
    target = parse_status(new_status)
    if source is None or target is None:
        return False
    return target in ALLOWED_TRANSITIONS.get(source, frozenset())


def apply_transition(
    reservations: List[Reservation],
    reservation_id: int,
    new_status: ReservationStatus,
    timestamp_field: Optional[str] = None,
    at: Optional[datetime] = None,
) -> List[Reservation]:
    """
    Return a new list with one entry moved to `new_status`.

    Only the matching entry is replaced. The terminal timestamp for the new
    status is set (defaulting to the field implied by the status) and the
    other terminal timestamp is cleared, so cancelled_at and picked_up_at are
    never both set. An id that is not in the list leaves it unchanged.

    Raises:
        InvalidTransition: the entry's current status cannot move to `new_status`
    """
    field_name = timestamp_field or TIMESTAMP_FIELDS.get(new_status)
    if field_name is not None and field_name not in _TERMINAL_TIMESTAMP_FIELDS:
        raise ValueError(f"Unknown timestamp field: {field_name}")
    moment = at or datetime.now(timezone.utc)

    patched: List[Reservation] = []
    for reservation in reservations:
        if reservation.id != reservation_id:
            patched.append(reservation)
            continue
        if not can_transition(reservation.status, new_status):
            raise InvalidTransition(
                f"Reservation {reservation_id} cannot move from {reservation.status} to {new_status.value}"
            )
        changes = {"status": new_status.value, "updated_at": moment}
        for terminal_field in _TERMINAL_TIMESTAMP_FIELDS:
            changes[terminal_field] = moment if terminal_field == field_name else None
        patched.append(replace(reservation, **changes))
    return patched


def replace_entry(reservations: List[Reservation], updated: Reservation) -> List[Reservation]:
    """Swap in the server's copy of a reservation, keeping the local product summary."""
    result: List[Reservation] = []
    for reservation in reservations:
        if reservation.id == updated.id:
            product = updated.product or reservation.product
            result.append(replace(updated, product=product))
        else:
            result.append(reservation)
    return result

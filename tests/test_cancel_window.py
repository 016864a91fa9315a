from __future__ import annotations

from datetime import timedelta

from conftest import NOW, reservation_payload
from reservation_client.models import CancelBlockReason, Reservation
from reservation_client.services.reservation_service import cancel_eligibility, status_color, status_label


def _reservation(status: str = "pending", minutes_ago: float = 0, **extra) -> Reservation:
    return Reservation.from_dict(
        reservation_payload(1, status=status, created_at=NOW - timedelta(minutes=minutes_ago), **extra)
    )


def test_pending_reservation_is_cancellable_right_after_creation():
    result = cancel_eligibility(_reservation(minutes_ago=0), NOW)

    assert result.eligible
    assert result.minutes_left == 20
    assert result.reason is None


def test_cancel_window_is_still_open_just_before_twenty_minutes():
    result = cancel_eligibility(_reservation(minutes_ago=19.99), NOW)

    assert result.eligible
    assert result.minutes_left == 0


def test_cancel_window_closes_at_exactly_twenty_minutes():
    result = cancel_eligibility(_reservation(minutes_ago=20), NOW)

    assert not result.eligible
    assert result.minutes_left == 0
    assert result.reason == CancelBlockReason.EXPIRED_WINDOW


def test_confirmed_reservation_reports_time_but_is_not_cancellable(service):
    reservation = _reservation(status="confirmed", minutes_ago=5)

    result = cancel_eligibility(reservation, NOW)

    assert not result.eligible
    assert result.reason == CancelBlockReason.WRONG_STATUS
    assert result.minutes_left == 15
    assert service.minutes_left_to_cancel(reservation) == 15
    assert not service.can_cancel(reservation)


def test_service_uses_its_clock_and_configured_window(service, clock):
    reservation = _reservation(minutes_ago=0)
    assert service.can_cancel(reservation)

    clock.advance(minutes=25)

    assert not service.can_cancel(reservation)
    assert service.minutes_left_to_cancel(reservation) == 0


def test_is_expired_only_when_expiry_has_passed(service, clock):
    no_expiry = _reservation()
    future = _reservation(expiresAt=(NOW + timedelta(hours=1)).isoformat())
    past = _reservation(expiresAt=(NOW - timedelta(seconds=1)).isoformat())

    assert not service.is_expired(no_expiry)
    assert not service.is_expired(future)
    assert service.is_expired(past)


def test_status_presentation_lookups_accept_wire_spellings():
    assert status_color("Picked Up") == status_color("PICKED_UP") == "#EBE5EB"
    assert status_label("canceled") == "Cancelled"
    assert status_color("mystery") == "#E5E5E5"
    assert status_label("mystery") == "mystery"


def test_reservation_without_creation_time_is_not_cancellable(service):
    payload = reservation_payload(1)
    del payload["createdAt"]
    reservation = Reservation.from_dict(payload)

    result = cancel_eligibility(reservation, NOW)

    assert not result.eligible
    assert result.minutes_left == 0
    assert result.reason == CancelBlockReason.UNKNOWN_AGE
    assert not service.can_cancel(reservation)

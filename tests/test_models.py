from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import NOW, reservation_payload
from reservation_client.models import (
    Reservation,
    ReservationStatus,
    normalize_status,
    parse_status,
    parse_timestamp,
)


@pytest.mark.parametrize(
    "raw",
    ["Picked Up", "PICKED_UP", "pickedup", "picked-up", "  picked   up "],
)
def test_normalize_status_collapses_case_and_separators(raw):
    assert normalize_status(raw) == "PICKED_UP"


def test_normalize_status_maps_american_spelling():
    assert normalize_status("canceled") == "CANCELLED"
    assert normalize_status("Cancelled") == "CANCELLED"


def test_normalize_status_is_idempotent():
    once = normalize_status("Picked Up")
    assert normalize_status(once) == once


def test_unknown_status_passes_through_normalized():
    assert normalize_status("on hold") == "ON_HOLD"
    assert parse_status("on hold") is None


def test_status_enum_sends_lowercase_to_backend():
    assert ReservationStatus.CONFIRMED.to_backend() == "confirmed"


def test_parse_timestamp_handles_zulu_naive_and_epoch_millis():
    assert parse_timestamp("2025-03-14T12:00:00Z") == NOW
    assert parse_timestamp("2025-03-14T12:00:00") == NOW
    assert parse_timestamp(int(NOW.timestamp() * 1000)) == NOW
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_reservation_from_payload_uses_outlet_id_and_normalizes_status():
    reservation = Reservation.from_dict(reservation_payload(3, status="pending", business_id=9))

    assert reservation.business_id == 9
    assert reservation.status == ReservationStatus.PENDING
    assert reservation.created_at == NOW
    assert reservation.product is None
    assert not reservation.is_terminal


def test_reservation_terminal_states():
    for status in ("picked up", "cancelled", "EXPIRED"):
        reservation = Reservation.from_dict(reservation_payload(1, status=status))
        assert reservation.is_terminal


def test_reservation_to_dict_uses_wire_names():
    reservation = Reservation.from_dict(
        reservation_payload(4, cancelledAt=datetime(2025, 3, 14, 12, 5, tzinfo=timezone.utc).isoformat())
    )
    data = reservation.to_dict()

    assert data["productId"] == 5
    assert data["cancelledAt"].startswith("2025-03-14T12:05")
    assert data["pickedUpAt"] is None


def test_missing_created_at_stays_empty():
    payload = reservation_payload(5)
    del payload["createdAt"]

    reservation = Reservation.from_dict(payload)

    assert reservation.created_at is None
    assert reservation.to_dict()["createdAt"] is None

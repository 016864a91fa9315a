from __future__ import annotations

from datetime import timedelta

from conftest import NOW, my_reservations, product_payload, reservation_payload
from reservation_client.errors import TransportError, ValidationError
from reservation_client.models import ReservationStatus
from reservation_client.services import AlertType
from reservation_client.state import ReservationState


def _state(service, notifier, prompter=None) -> ReservationState:
    if prompter is None:
        return ReservationState(service, notifier, user_id=7)
    return ReservationState(service, notifier, prompter=prompter, user_id=7)


def test_fetch_replaces_list_and_clears_flags(service, stub_client, notifier):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1)))
    stub_client.on("getAllProducts", {"getAllProducts": [product_payload(5)]})
    state = _state(service, notifier)

    assert state.fetch_mine()

    assert [r.id for r in state.reservations] == [1]
    assert state.loading is False
    assert state.error is None


def test_failed_fetch_keeps_previous_list(service, stub_client, notifier):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1)))
    stub_client.on("getAllProducts", {"getAllProducts": []})
    state = _state(service, notifier)
    state.fetch_mine()

    stub_client.on("getMyReservations", TransportError("Could not reach the server"))
    assert not state.refresh()

    assert [r.id for r in state.reservations] == [1]
    assert state.error == "Could not reach the server"
    assert state.refreshing is False
    assert notifier.get_alerts(7) == []


def test_unexpected_error_uses_fallback_message(service, stub_client, notifier):
    stub_client.on("getMyReservations", RuntimeError("kaboom"))
    state = _state(service, notifier)

    assert not state.fetch_mine()
    assert state.error == "Failed to load reservations"


def test_superseded_fetch_response_is_discarded(service, stub_client, notifier):
    state = _state(service, notifier)
    stub_client.on("getAllProducts", {"getAllProducts": []})
    responses = iter([my_reservations(reservation_payload(1)), my_reservations(reservation_payload(2))])

    def answer(variables):
        first = next(responses)
        if first["getMyReservations"][0]["id"] == 1:
            # a newer fetch starts and finishes while the first is in flight
            assert state.refresh()
        return first

    stub_client.on("getMyReservations", answer)

    assert not state.fetch_mine()
    assert [r.id for r in state.reservations] == [2]


def test_create_alerts_on_success(service, stub_client, notifier):
    stub_client.on("createReservation", {"createReservation": reservation_payload(9)})
    state = _state(service, notifier)

    reservation = state.create(product_id=5, business_id=2, quantity=1)

    assert reservation.id == 9
    [alert] = notifier.get_alerts(7)
    assert alert.alert_type == AlertType.SUCCESS
    assert alert.reservation_id == 9


def test_create_failure_sets_error_and_alerts(service, stub_client, notifier):
    stub_client.on("createReservation", ValidationError("Not enough stock"))
    state = _state(service, notifier)

    assert state.create(product_id=5, business_id=2, quantity=4) is None

    assert state.error == "Not enough stock"
    assert notifier.get_alerts(7)[0].message == "Not enough stock"
    assert state.loading is False


def test_get_by_id_failure_is_stored(service, stub_client, notifier):
    stub_client.on("getMyReservations", my_reservations())
    state = _state(service, notifier)

    assert state.get_by_id(3) is None
    assert state.error == "Reservation not found"


def test_create_fetch_cancel_and_second_cancel_is_refused(service, stub_client, notifier, clock, make_prompter):
    prompter = make_prompter(True)
    state = _state(service, notifier, prompter)
    stub_client.on("createReservation", {"createReservation": reservation_payload(21)})
    stub_client.on("getMyReservations", my_reservations(reservation_payload(21)))
    stub_client.on("getAllProducts", {"getAllProducts": [product_payload(5)]})
    stub_client.on(
        "cancelReservation",
        {"cancelReservation": reservation_payload(21, status="cancelled", cancelledAt=(NOW + timedelta(minutes=10)).isoformat())},
    )

    assert state.create(product_id=5, business_id=2, quantity=1).status == ReservationStatus.PENDING
    assert state.fetch_mine()

    clock.advance(minutes=10)
    assert state.cancel(21)

    [cancelled] = state.reservations
    assert cancelled.status == ReservationStatus.CANCELLED
    assert cancelled.cancelled_at == NOW + timedelta(minutes=10)
    assert cancelled.product.name == "Product 5"
    assert len(prompter.prompts) == 1

    assert not state.cancel(21)
    assert len(stub_client.calls_for("cancelReservation")) == 1
    latest = notifier.get_alerts(7)[0]
    assert latest.alert_type == AlertType.WARNING
    assert latest.message == "Only pending reservations can be cancelled."


def test_cancel_outside_window_makes_no_call(service, stub_client, notifier, clock):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1)))
    stub_client.on("getAllProducts", {"getAllProducts": []})
    state = _state(service, notifier)
    state.fetch_mine()

    clock.advance(minutes=20)

    assert not state.cancel(1)
    assert stub_client.calls_for("cancelReservation") == []
    assert notifier.get_alerts(7)[0].message == "The cancellation window for this reservation has expired."


def test_cancel_declined_by_user(service, stub_client, notifier, make_prompter):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1)))
    stub_client.on("getAllProducts", {"getAllProducts": []})
    prompter = make_prompter(False)
    state = _state(service, notifier, prompter)
    state.fetch_mine()

    assert not state.cancel(1)

    assert prompter.prompts == [("Cancel reservation", "Are you sure you want to cancel this reservation?")]
    assert stub_client.calls_for("cancelReservation") == []
    assert state.reservations[0].status == ReservationStatus.PENDING


def test_cancel_failure_leaves_list_untouched(service, stub_client, notifier):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1)))
    stub_client.on("getAllProducts", {"getAllProducts": []})
    stub_client.on("cancelReservation", ValidationError("Reservation already confirmed"))
    state = _state(service, notifier)
    state.fetch_mine()

    assert not state.cancel(1)

    assert state.reservations[0].status == ReservationStatus.PENDING
    assert state.error is None
    assert notifier.get_alerts(7)[0].message == "Reservation already confirmed"


def test_cancel_unknown_reservation(service, notifier):
    state = _state(service, notifier)

    assert not state.cancel(404)
    assert notifier.get_alerts(7)[0].message == "Reservation not found"


def test_patch_falls_back_to_server_copy_when_local_state_disagrees(service, stub_client, notifier):
    stub_client.on("getMyReservations", my_reservations(reservation_payload(1, status="cancelled")))
    stub_client.on("getAllProducts", {"getAllProducts": [product_payload(5)]})
    stub_client.on("updateReservationStatus", {"updateReservationStatus": reservation_payload(1, status="confirmed")})
    state = _state(service, notifier)
    state.fetch_mine()

    assert state.confirm(1)

    [reservation] = state.reservations
    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.product.name == "Product 5"

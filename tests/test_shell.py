from __future__ import annotations

from conftest import StubConfig
from reservation_client.pollers import ManualTicker
from reservation_client.session import InMemorySessionStore
from reservation_client.shell import ClientShell


def _shell(stub_client, store):
    customer, business = ManualTicker(), ManualTicker()
    shell = ClientShell(
        session_store=store,
        client=stub_client,
        config=StubConfig,
        customer_ticker=customer,
        business_ticker=business,
    )
    return shell, customer, business


def test_consumer_session_starts_customer_poller(stub_client, consumer_session):
    shell, customer, business = _shell(stub_client, consumer_session)

    user = shell.on_session_changed()

    assert user.id == 7
    assert customer.running
    assert not business.running
    assert shell.consumer_state().user_id == 7


def test_business_session_starts_business_poller(stub_client, business_session):
    shell, customer, business = _shell(stub_client, business_session)

    shell.on_session_changed()

    assert business.running
    assert not customer.running
    assert shell.business_state(3).business_id == 3


def test_role_change_switches_pollers(stub_client):
    store = InMemorySessionStore(token="t", user={"id": 7, "role": "CONSUMER"})
    shell, customer, business = _shell(stub_client, store)
    shell.on_session_changed()

    store.save("t", {"id": 40, "role": "BUSINESS"})
    shell.on_session_changed()

    assert not customer.running
    assert business.running


def test_no_session_and_logout_stop_polling(stub_client, consumer_session):
    shell, customer, business = _shell(stub_client, consumer_session)
    shell.on_session_changed()

    shell.logout()

    assert not customer.running
    assert consumer_session.get_token() is None
    assert shell.on_session_changed() is None
    assert not customer.running and not business.running


def test_consumer_state_reports_own_changes_to_customer_poller(stub_client, consumer_session):
    shell, customer, _ = _shell(stub_client, consumer_session)
    shell.on_session_changed()

    state = shell.consumer_state()
    state.on_local_transition(5, "CANCELLED")

    assert shell.customer_poller.snapshot == {5: "CANCELLED"}

# tests/conftest.py
"""
Pytest configuration and shared fixtures.

Collaborators are replaced by hand-written stubs: the GraphQL transport is a
`StubGraphQLClient` answering per operation name, time comes from a
`FrozenClock`, and pollers run on a `ManualTicker`.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reservation_client.config import Config
from reservation_client.observability.metrics import reset_metrics
from reservation_client.pollers import ManualTicker
from reservation_client.services import CatalogService, NotificationService, ReservationService
from reservation_client.session import InMemorySessionStore

NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)


class StubConfig:
    API_URL = "http://api.test/graphql"
    API_TIMEOUT_SECONDS = 5.0
    PRODUCT_CATALOG_LIMIT = 1000
    CANCEL_WINDOW_MINUTES = 20
    RECENT_ACTIVITY_HOURS = 24
    CUSTOMER_POLL_INTERVAL_SECONDS = 15.0
    BUSINESS_POLL_INTERVAL_SECONDS = 30.0
    ALERT_DURATION_MS = 6000
    MAX_ALERTS_PER_USER = 50
    SESSION_FILE = Config.SESSION_FILE
    OBSERVABILITY_ENABLED = True


class FrozenClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class StubGraphQLClient:
    """
    Answers `execute` by operation name.

    A registered answer is a data dict, an exception instance to raise, or a
    callable taking the variables and returning data (or raising).
    """

    def __init__(self) -> None:
        self.answers: Dict[str, Any] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def on(self, operation: str, answer: Any) -> "StubGraphQLClient":
        self.answers[operation] = answer
        return self

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None, operation: str = "graphql"):
        variables = dict(variables or {})
        self.calls.append((operation, variables))
        if operation not in self.answers:
            raise AssertionError(f"Unexpected GraphQL operation: {operation}")
        answer = self.answers[operation]
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(variables)
        return answer

    def calls_for(self, operation: str) -> List[Dict[str, Any]]:
        return [variables for name, variables in self.calls if name == operation]


def reservation_payload(
    reservation_id: int,
    status: str = "pending",
    created_at: datetime = NOW,
    product_id: int = 5,
    business_id: Optional[int] = 2,
    quantity: int = 1,
    user_id: int = 7,
    updated_at: Optional[datetime] = None,
    **extra: Any,
) -> Dict[str, Any]:
    payload = {
        "id": reservation_id,
        "userId": user_id,
        "productId": product_id,
        "outletId": business_id,
        "quantity": quantity,
        "status": status,
        "createdAt": created_at.isoformat(),
        "updatedAt": (updated_at or created_at).isoformat(),
        "expiresAt": None,
        "pickedUpAt": None,
        "cancelledAt": None,
    }
    payload.update(extra)
    return payload


def product_payload(product_id: int, business_id: int = 2, name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": product_id,
        "businessId": business_id,
        "name": name or f"Product {product_id}",
        "description": "Day-old bread",
        "price": 4.5,
        "discountedPrice": 2.0,
        "stock": 10,
        "imageUrl": f"https://img.test/{product_id}.png",
        "status": "available",
    }


def business_payload(business_id: int, name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": business_id,
        "name": name or f"Bakery {business_id}",
        "address": "Main St 1",
        "latitude": -33.45,
        "longitude": -70.66,
        "isActive": True,
    }


def my_reservations(*payloads: Dict[str, Any]) -> Dict[str, Any]:
    return {"getMyReservations": list(payloads)}


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def stub_client() -> StubGraphQLClient:
    return StubGraphQLClient()


@pytest.fixture
def consumer_session() -> InMemorySessionStore:
    return InMemorySessionStore(token="consumer-token", user={"id": 7, "role": "CONSUMER", "name": "Ana"})


@pytest.fixture
def business_session() -> InMemorySessionStore:
    return InMemorySessionStore(token="business-token", user={"id": 40, "role": "BUSINESS", "name": "Owner"})


@pytest.fixture
def notifier() -> NotificationService:
    return NotificationService(config=StubConfig)


@pytest.fixture
def catalog(stub_client) -> CatalogService:
    return CatalogService(stub_client, config=StubConfig)


@pytest.fixture
def service(stub_client, consumer_session, catalog, clock) -> ReservationService:
    return ReservationService(stub_client, consumer_session, catalog, config=StubConfig, clock=clock)


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def make_prompter() -> Callable[[bool], Callable[[str, str], bool]]:
    def _factory(answer: bool):
        def _prompter(title: str, message: str) -> bool:
            _prompter.prompts.append((title, message))
            return answer

        _prompter.prompts = []
        return _prompter

    return _factory

"""
Client shell: wires config, session, services, state containers and pollers.

The shell owns the notification pollers. `on_session_changed()` stops both
and starts the one matching the current user's role, so polling follows
login, logout and role changes explicitly instead of implicitly.
"""
from __future__ import annotations

import logging
from typing import Optional

from reservation_client.config import Config
from reservation_client.graphql_client import GraphQLClient
from reservation_client.models import SessionUser
from reservation_client.observability import bind_log_context, clear_log_context
from reservation_client.pollers import BusinessNotificationPoller, CustomerNotificationPoller, Ticker
from reservation_client.services import CatalogService, NotificationService, ReservationService
from reservation_client.session import SessionStore
from reservation_client.state import BusinessReservationState, Prompter, ReservationState, always_confirm


class ClientShell:
    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        client: Optional[GraphQLClient] = None,
        config: type[Config] = Config,
        prompter: Prompter = always_confirm,
        customer_ticker: Optional[Ticker] = None,
        business_ticker: Optional[Ticker] = None,
    ) -> None:
        self.config = config
        self.session_store = session_store or SessionStore(config.SESSION_FILE)
        self.client = client or GraphQLClient(config.API_URL, self.session_store, config.API_TIMEOUT_SECONDS)
        self.catalog = CatalogService(self.client, config=config)
        self.reservations = ReservationService(self.client, self.session_store, self.catalog, config=config)
        self.notifications = NotificationService(config=config)
        self.prompter = prompter
        self.customer_poller = CustomerNotificationPoller(
            self.reservations,
            self.notifications,
            config=config,
            ticker=customer_ticker,
        )
        self.business_poller = BusinessNotificationPoller(
            self.reservations,
            self.catalog,
            config=config,
            ticker=business_ticker,
        )
        self.user: Optional[SessionUser] = None
        self.logger = logging.getLogger(__name__)

    def on_session_changed(self) -> Optional[SessionUser]:
        """Re-read the session and (re)start the poller for the user's role."""
        self.stop()
        token = self.session_store.get_token()
        user = self.session_store.get_user() if token else None
        self.user = user
        if user is None:
            self.logger.info("No active session; notification polling is off")
            return None

        bind_log_context(user_id=user.id, role=user.role, component="shell")
        if user.is_consumer:
            self.customer_poller.start(user.id, user.role)
        elif user.is_business:
            self.business_poller.start(user.id, user.role)
        else:
            self.logger.warning("Unknown role %s; notification polling is off", user.role)
        return user

    def logout(self) -> None:
        self.stop()
        self.session_store.clear()
        self.user = None

    def stop(self) -> None:
        self.customer_poller.stop()
        self.business_poller.stop()
        clear_log_context()

    def consumer_state(self) -> ReservationState:
        user_id = self.user.id if self.user else None
        return ReservationState(
            self.reservations,
            self.notifications,
            prompter=self.prompter,
            user_id=user_id,
            on_local_transition=self.customer_poller.note_local_transition,
        )

    def business_state(self, business_id: int) -> BusinessReservationState:
        user_id = self.user.id if self.user else None
        return BusinessReservationState(self.reservations, business_id, self.notifications, user_id=user_id)

"""
GraphQL transport.

Every call is fire-once: failures are translated into the client's error
taxonomy and handed back to the caller, who decides whether to retry.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from reservation_client.config import Config
from reservation_client.errors import TransportError, ValidationError, clean_server_message
from reservation_client.observability import increment_counter, timed
from reservation_client.session import SessionStore

logger = logging.getLogger(__name__)


class GraphQLClient:
    """POSTs {query, variables} to the API and returns the `data` object."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        session_store: Optional[SessionStore] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url or Config.API_URL
        self.session_store = session_store
        self.timeout = timeout or Config.API_TIMEOUT_SECONDS
        self.http = http or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.session_store.get_token() if self.session_store else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation: str = "graphql",
    ) -> Dict[str, Any]:
        """
        Run a query or mutation.

        Args:
            query: GraphQL document
            variables: Variables for the document
            operation: Short name used for logs and metrics

        Returns:
            The `data` object of the response

        Raises:
            ValidationError: The server answered with GraphQL errors
            TransportError: Connectivity failure, HTTP error, or malformed body
        """
        payload = {"query": query, "variables": variables or {}}
        try:
            with timed("api_request_latency_ms", labels={"operation": operation}):
                response = self.http.post(
                    self.api_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            increment_counter("api_requests_total", labels={"operation": operation, "outcome": "network_error"})
            logger.error("Request %s failed: %s", operation, e)
            raise TransportError(clean_server_message(str(e), TransportError.default_message)) from e

        body = self._decode(response, operation)
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {"message": errors[0]}
            message = clean_server_message(first.get("message"), ValidationError.default_message)
            increment_counter("api_requests_total", labels={"operation": operation, "outcome": "rejected"})
            logger.warning("Server rejected %s: %s", operation, message)
            raise ValidationError(message)

        if response.status_code != 200:
            increment_counter("api_requests_total", labels={"operation": operation, "outcome": "http_error"})
            logger.error("Request %s returned HTTP %d", operation, response.status_code)
            raise TransportError(f"HTTP error {response.status_code}: {response.reason or ''}".strip())

        data = body.get("data") if isinstance(body, dict) else None
        if not data:
            increment_counter("api_requests_total", labels={"operation": operation, "outcome": "empty"})
            raise TransportError("No data received from server")

        increment_counter("api_requests_total", labels={"operation": operation, "outcome": "ok"})
        return data

    def _decode(self, response: requests.Response, operation: str) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError:
            if response.status_code == 200:
                logger.error("Request %s returned a non-JSON body", operation)
                raise TransportError("Malformed response from server")
            return {}

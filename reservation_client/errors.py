"""Exceptions raised by the reservation client."""
from __future__ import annotations

import html
from typing import Optional

import bleach


def clean_server_message(message: Optional[str], fallback: str) -> str:
    """
    Strip any markup from a message the server sent before it reaches the user.

    Tags are removed; the text itself stays verbatim, so bleach's entity
    escaping of characters such as "<" and "&" is undone.
    """
    if not message:
        return fallback
    cleaned = html.unescape(bleach.clean(str(message), tags=[], attributes={}, strip=True)).strip()
    return cleaned or fallback


class ReservationClientError(Exception):
    """Base class for every error the client surfaces to callers."""

    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionError(ReservationClientError):
    """No token was found locally; the user has to log in again."""

    default_message = "No active session"


class ValidationError(ReservationClientError):
    """The server (or a local pre-check) rejected the request on business rules."""

    default_message = "Request rejected"


class TransportError(ReservationClientError):
    """Connectivity problem or an unexpected response from the API."""

    default_message = "Could not reach the server"

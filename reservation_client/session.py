"""Access to the locally persisted session (bearer token + cached user profile).

The auth flow that writes the session lives outside this package; the client
only reads it, and clears it on logout.
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from reservation_client.config import Config
from reservation_client.errors import SessionError
from reservation_client.models import SessionUser

TOKEN_KEY = "auth_token"
USER_KEY = "user_data"

logger = logging.getLogger(__name__)


class SessionStore:
    """JSON-file backed session blob: {"auth_token": "...", "user_data": {...}}."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else Config.SESSION_FILE
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning("Session file %s is not valid JSON; treating as logged out", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get_token(self) -> Optional[str]:
        with self._lock:
            token = self._read().get(TOKEN_KEY)
        return token or None

    def require_token(self) -> str:
        """Return the stored token or raise SessionError before any request is made."""
        token = self.get_token()
        if not token:
            raise SessionError("No active session")
        return token

    def get_user(self) -> Optional[SessionUser]:
        with self._lock:
            user_data = self._read().get(USER_KEY)
        if isinstance(user_data, str):
            try:
                user_data = json.loads(user_data)
            except json.JSONDecodeError:
                return None
        if not isinstance(user_data, dict) or user_data.get("id") in (None, ""):
            return None
        try:
            user_id = int(user_data["id"])
        except (TypeError, ValueError):
            return None
        known = {"id", "role", "name", "email"}
        return SessionUser(
            id=user_id,
            role=str(user_data.get("role") or ""),
            name=user_data.get("name"),
            email=user_data.get("email"),
            extra={k: v for k, v in user_data.items() if k not in known},
        )

    def require_user(self) -> SessionUser:
        user = self.get_user()
        if user is None:
            raise SessionError("No active session")
        return user

    def save(self, token: str, user: Dict[str, Any]) -> None:
        with self._lock:
            self._write({TOKEN_KEY: token, USER_KEY: user})

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self.path.unlink()


class InMemorySessionStore(SessionStore):
    """Session kept in process memory; used by embedders and tests."""

    def __init__(self, token: Optional[str] = None, user: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(path=Path("."))
        self._data: Dict[str, Any] = {}
        if token is not None:
            self._data[TOKEN_KEY] = token
        if user is not None:
            self._data[USER_KEY] = user

    def _read(self) -> Dict[str, Any]:
        return dict(self._data)

    def _write(self, data: Dict[str, Any]) -> None:
        self._data = dict(data)

    def clear(self) -> None:
        with self._lock:
            self._data = {}

"""
Session and user models.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel

# 32 random bytes, ~43 url-safe characters
SESSION_ID_BYTES = 32


def generate_session_id() -> str:
    """Return a fresh, unguessable session id."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """The identity persisted in a session under the "user" key."""
    email: str


@dataclass
class Session:
    """
    Server-side session state.

    Attributes:
        id: Opaque identifier, generated at creation and never reused
        data: Named values held by the session; logged-in sessions hold "user"
        expiry: Absolute UTC expiry, or None for a session that never expires
        dirty: Whether data or expiry changed since the session was loaded
            or last stored
    """

    id: str = field(default_factory=generate_session_id)
    data: dict[str, Any] = field(default_factory=dict)
    expiry: Optional[datetime] = None
    dirty: bool = field(default=False, compare=False)

    def insert(self, key: str, value: Any) -> None:
        """Set a value, marking the session dirty."""
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        self.data[key] = value
        self.dirty = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def remove(self, key: str) -> None:
        if key in self.data:
            del self.data[key]
            self.dirty = True

    def expire_in(self, ttl: timedelta, now: Optional[datetime] = None) -> None:
        """Set expiry to ``now + ttl``."""
        self.expiry = (now or utcnow()) + ttl
        self.dirty = True

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expiry is None:
            return False
        return (now or utcnow()) >= self.expiry

    def reset_data_changed(self) -> None:
        self.dirty = False

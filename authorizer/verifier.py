"""
Request authorizer backed by the session store.

Resolves the session cookie on a request to a logged-in user. The only
outcomes are accept, with the user's email as identity context, or deny.
Deny never tells the caller why; the reason is logged instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from errors.exceptions import MalformedInput, StoreError
from session.cookie import COOKIE_NAME
from session.model import Session, User
from session.store import SessionStore
from telemetry.service import log_auth_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizerDecision:
    """Accept or deny, plus the identity context on accept."""
    is_authorized: bool
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def accept(cls, user: User) -> "AuthorizerDecision":
        return cls(is_authorized=True, context={"email": user.email})

    @classmethod
    def deny(cls) -> "AuthorizerDecision":
        return cls(is_authorized=False)


def find_session_cookie(cookies: Iterable[str], cookie_name: str = COOKIE_NAME) -> Optional[str]:
    """
    Return the value of the session cookie among ``name=value`` entries.

    Returns None if no entry names the session cookie.

    Raises:
        MalformedInput: If the session cookie entry has no
            ``=`` separator.
    """
    for entry in cookies:
        if not isinstance(entry, str) or cookie_name not in entry:
            continue

        name, sep, value = entry.strip().partition("=")
        if name.strip() != cookie_name:
            continue
        if not sep:
            raise MalformedInput("session cookie has no value")
        return value.strip()
    return None


class SessionVerifier:
    """
    Verifies a request's session cookie against the session store.

    Expired sessions are destroyed here, not in the store: the store
    returns them so this is the one place where expiry is enforced.
    """

    def __init__(self, sessions: SessionStore, cookie_name: str = COOKIE_NAME):
        self.sessions = sessions
        self.cookie_name = cookie_name

    async def verify(self, cookies: Iterable[str]) -> AuthorizerDecision:
        """
        Decide whether the request carrying ``cookies`` is logged in.

        Never raises for client input or store failures; both deny.
        """
        try:
            cookie_value = find_session_cookie(cookies, self.cookie_name)
        except MalformedInput as e:
            return self._deny("malformed_cookie", e.message)

        if not cookie_value:
            return self._deny("no_cookie")

        try:
            session = await self.sessions.load(cookie_value)
        except StoreError as e:
            return self._deny("store_error", e.message)
        except Exception as e:
            logger.error(
                "Session load failed unexpectedly",
                exc_info=True,
                extra={"extra_data": {"error_type": type(e).__name__}}
            )
            return self._deny("load_error", type(e).__name__)

        if session is None:
            return self._deny("unknown_session")

        user = self._user_of(session)
        if user is None:
            return self._deny("no_user")

        if session.is_expired():
            await self._evict(session)
            return self._deny("expired")

        log_auth_event("authorize", "accept")
        return AuthorizerDecision.accept(user)

    @staticmethod
    def _user_of(session: Session) -> Optional[User]:
        raw = session.get("user")
        if raw is None:
            return None
        try:
            return User.model_validate(raw)
        except ValidationError:
            return None

    async def _evict(self, session: Session) -> None:
        try:
            await self.sessions.destroy(session)
        except StoreError as e:
            logger.error(
                "Failed to destroy expired session",
                extra={"extra_data": {"error": e.message}}
            )

    @staticmethod
    def _deny(reason: str, message: Optional[str] = None) -> AuthorizerDecision:
        log_auth_event(
            "authorize", "deny", reason=reason,
            details={"message": message} if message else None
        )
        return AuthorizerDecision.deny()

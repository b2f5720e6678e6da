"""
Session store abstraction.

The login flow and the authorizer only see sessions through this
interface. The production binding stores records in a key-value backend;
tests bind the same backend to an in-memory store, so both exercise the
identical contract.
"""

from abc import ABC, abstractmethod
from typing import Optional

from session.model import Session


class SessionStore(ABC):
    """
    Abstract base class for session storage implementations.

    All methods are async to support non-blocking I/O with external
    storage systems.
    """

    @abstractmethod
    async def load(self, cookie_value: str) -> Optional[Session]:
        """
        Resolve a cookie value to its session.

        Expiry is checked and logged but not enforced: an expired session
        is still returned, and callers decide whether to destroy it.

        Args:
            cookie_value: Value of the session cookie as sent by the client.

        Returns:
            The session, or None if the cookie value is malformed or no
            record exists for it.

        Raises:
            StoreError: If the backend fails or the stored payload cannot
                be decoded.
        """
        pass

    @abstractmethod
    async def store(self, session: Session) -> Optional[str]:
        """
        Upsert a session and return the cookie value that resolves to it.

        Storing the same id again overwrites the previous record. On
        success the session's dirty flag is cleared.

        Args:
            session: Session to persist.

        Returns:
            Cookie value for the session.

        Raises:
            StoreError: If the write fails.
        """
        pass

    @abstractmethod
    async def destroy(self, session: Session) -> None:
        """
        Delete a session's record.

        Idempotent: destroying a session that is already gone is not an error.

        Raises:
            StoreError: If the delete fails.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """
        Delete every stored session.

        Best-effort and not atomic: individual delete failures are logged
        and skipped, and sessions stored concurrently may survive.

        Raises:
            StoreError: If the sessions cannot be enumerated.
        """
        pass

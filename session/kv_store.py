"""
Session store over a key-value backend.
"""

import logging
from typing import Optional

from pydantic_core import PydanticSerializationError

from errors.exceptions import StoreError
from session.codec import (
    SESSION_PARTITION,
    SessionRecord,
    decode_session,
    encode_session,
)
from session.cookie import CookieCodec
from session.model import Session
from session.store import SessionStore
from storage.store import KeyValueStore

logger = logging.getLogger(__name__)


class KeyValueSessionStore(SessionStore):
    """
    SessionStore that keeps one record per session in a KeyValueStore.

    The store owns the mapping from cookie value to record key: cookie
    values are decoded with the CookieCodec into a session id, which is the
    record's sort key under the "SESSION" partition.

    Attributes:
        kv: Backend holding the records
        cookies: Codec for cookie values
    """

    def __init__(self, kv: KeyValueStore, cookies: CookieCodec):
        self.kv = kv
        self.cookies = cookies

    async def load(self, cookie_value: str) -> Optional[Session]:
        session_id = self.cookies.decode(cookie_value)
        if session_id is None:
            logger.info("Session cookie could not be decoded")
            return None

        item = await self.kv.get_item(SESSION_PARTITION, session_id)
        if item is None:
            logger.info("Session not found")
            return None

        session = decode_session(SessionRecord.from_item(item))
        return self._validate(session)

    def _validate(self, session: Session) -> Session:
        # Eviction of expired sessions is left to the caller
        if session.is_expired():
            logger.info(
                "Loaded expired session",
                extra={"extra_data": {"expiry": session.expiry}}
            )
        return session

    async def store(self, session: Session) -> Optional[str]:
        try:
            record = encode_session(session)
        except PydanticSerializationError as e:
            raise StoreError("session data could not be serialized") from e
        await self.kv.put_item(record.to_item())
        session.reset_data_changed()
        logger.info("Session stored")
        return self.cookies.encode(session.id)

    async def destroy(self, session: Session) -> None:
        await self.kv.delete_item(SESSION_PARTITION, session.id)
        logger.info("Session destroyed")

    async def clear(self) -> None:
        items = await self.kv.query(SESSION_PARTITION)
        logger.info(
            "Clearing session store",
            extra={"extra_data": {"sessions": len(items)}}
        )

        failed = 0
        for item in items:
            try:
                record = SessionRecord.from_item(item)
                await self.kv.delete_item(record.partition_key, record.sort_key)
            except StoreError as e:
                failed += 1
                logger.error(
                    "Failed to delete session during clear",
                    extra={"extra_data": {"error": e.message}}
                )

        if failed:
            logger.warning(
                "Session store cleared with failures",
                extra={"extra_data": {"failed": failed, "total": len(items)}}
            )

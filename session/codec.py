"""
Session record codec.

Maps a Session to the item stored in the key-value store and back. Every
session lives under the constant partition key "SESSION", with the session
id as sort key and ``{"data": ..., "expiry": ...}`` serialized as JSON in
the ``session`` attribute.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from errors.exceptions import StoreError
from session.model import Session
from storage.store import Item, PARTITION_KEY, SORT_KEY

SESSION_PARTITION = "SESSION"
PAYLOAD_ATTRIBUTE = "session"


class SessionPayload(BaseModel):
    """Serialized form of a session's data and expiry."""
    data: dict[str, Any]
    expiry: Optional[datetime] = None


@dataclass(frozen=True)
class SessionRecord:
    """Durable representation of one session."""
    partition_key: str
    sort_key: str
    payload: str

    def to_item(self) -> Item:
        return {
            PARTITION_KEY: self.partition_key,
            SORT_KEY: self.sort_key,
            PAYLOAD_ATTRIBUTE: self.payload,
        }

    @classmethod
    def from_item(cls, item: Item) -> "SessionRecord":
        if not isinstance(item, dict):
            raise StoreError(
                "session record is not a mapping",
                details={"type": type(item).__name__},
            )
        try:
            return cls(
                partition_key=item[PARTITION_KEY],
                sort_key=item[SORT_KEY],
                payload=item[PAYLOAD_ATTRIBUTE],
            )
        except KeyError as e:
            raise StoreError(
                "session record is missing an attribute",
                details={"attribute": e.args[0]},
            ) from e


def encode_session(session: Session) -> SessionRecord:
    """Serialize a session into its record."""
    payload = SessionPayload(data=session.data, expiry=session.expiry)
    return SessionRecord(
        partition_key=SESSION_PARTITION,
        sort_key=session.id,
        payload=payload.model_dump_json(),
    )


def decode_session(record: SessionRecord) -> Session:
    """
    Rebuild a session from its record.

    Raises:
        StoreError: If the payload is not a valid serialized session.
    """
    if not isinstance(record.payload, (str, bytes)):
        raise StoreError("session payload is not a string")

    try:
        payload = SessionPayload.model_validate_json(record.payload)
    except ValidationError as e:
        raise StoreError(
            "session payload could not be decoded",
            details={"errors": e.error_count()},
        ) from e

    expiry = payload.expiry
    if expiry is not None and expiry.tzinfo is None:
        # Naive timestamps are UTC
        expiry = expiry.replace(tzinfo=timezone.utc)

    return Session(id=record.sort_key, data=payload.data, expiry=expiry)

"""
Server-side sessions.

Sessions are identified by an opaque cookie value and persisted as records
in a key-value store, so any stateless request handler can recover who is
logged in and until when.
"""

from session.model import Session, User, generate_session_id
from session.cookie import COOKIE_NAME, CookieCodec, format_set_cookie
from session.codec import (
    SESSION_PARTITION,
    SessionRecord,
    decode_session,
    encode_session,
)
from session.store import SessionStore
from session.kv_store import KeyValueSessionStore

__all__ = [
    "Session",
    "User",
    "generate_session_id",
    "COOKIE_NAME",
    "CookieCodec",
    "format_set_cookie",
    "SESSION_PARTITION",
    "SessionRecord",
    "decode_session",
    "encode_session",
    "SessionStore",
    "KeyValueSessionStore",
]

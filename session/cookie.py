"""
Session cookie codec.

A cookie value is ``<signature>.<id>`` where both parts are unpadded
url-safe base64 and the signature is HMAC-SHA256 of the session id under
the server's signing key. The alphabet is ``[A-Za-z0-9_-.]``, so a value
can go into a Set-Cookie header or a query string as-is, and never
contains ``=``.

Session ids are random, so two sessions never share a cookie; the
signature means a client cannot forge a cookie for an id it guessed or
observed in storage.
"""

import hashlib
import hmac
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional, Union

COOKIE_NAME = "SESSION"

# Longer inputs are rejected before any decoding work
MAX_COOKIE_VALUE_LENGTH = 512


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return urlsafe_b64decode(text + "=" * (-len(text) % 4))


class CookieCodec:
    """Signs session ids into cookie values and verifies them back."""

    def __init__(self, secret_key: Union[str, bytes], algorithm: str = "sha256"):
        """
        Args:
            secret_key: HMAC key; rotating it invalidates every issued cookie
            algorithm: hashlib digest name
        """
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        if not secret_key:
            raise ValueError("secret_key must not be empty")

        self._secret_key = secret_key
        self._hash_func = getattr(hashlib, algorithm)

    def _sign(self, value: bytes) -> bytes:
        return hmac.new(self._secret_key, value, self._hash_func).digest()

    def encode(self, session_id: str) -> str:
        """Return the cookie value for a session id."""
        id_bytes = session_id.encode("utf-8")
        return f"{_b64encode(self._sign(id_bytes))}.{_b64encode(id_bytes)}"

    def decode(self, cookie_value: str) -> Optional[str]:
        """
        Return the session id a cookie value was issued for.

        Returns None for anything that is not a well-formed value signed
        with this codec's key. Never raises on client input.
        """
        if not isinstance(cookie_value, str) or len(cookie_value) > MAX_COOKIE_VALUE_LENGTH:
            return None

        sig_b64, sep, id_b64 = cookie_value.strip().partition(".")
        if not sep or not sig_b64 or not id_b64:
            return None

        try:
            signature = _b64decode(sig_b64)
            id_bytes = _b64decode(id_b64)
            if not hmac.compare_digest(signature, self._sign(id_bytes)):
                return None
            return id_bytes.decode("utf-8")
        except ValueError:
            # binascii.Error and UnicodeDecodeError are both ValueErrors
            return None


def format_set_cookie(cookie_value: str, name: str = COOKIE_NAME) -> str:
    """Build the Set-Cookie header value for a session cookie."""
    return f"{name}={cookie_value}; SameSite=Lax; Path=/"

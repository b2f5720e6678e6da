"""
GitHub OAuth2 authorization-code login.

The flow is two stateless steps. ``redirect_to_provider`` sends the browser
to GitHub with a callback URL derived from the current request;
``handle_callback`` exchanges the returned code for an access token, reads
the user's primary verified email, and creates a week-long session. Nothing
is stored between the steps: everything the callback needs comes back in
GitHub's redirect.
"""

import logging
import secrets
from datetime import timedelta
from typing import Iterable, Optional
from urllib.parse import urlencode

import httpx
from fastapi import status
from fastapi.responses import RedirectResponse
from pydantic import TypeAdapter, ValidationError

from errors.exceptions import AuthError, ConfigError, ProviderError, StoreError
from oauth.models import FlowRequest, GitHubTokenResponse, GitHubUserEmail
from params.provider import SecretProvider
from session.cookie import COOKIE_NAME, format_set_cookie
from session.model import Session, User
from session.store import SessionStore
from telemetry.service import log_auth_event

logger = logging.getLogger(__name__)

GITHUB_AUTH_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_EMAILS_URL = "https://api.github.com/user/emails"

# The token must carry exactly this scope; a wider grant is rejected too
REQUIRED_SCOPE = "user:email"

START_SUFFIX = "/start"
CALLBACK_SUFFIX = "/callback"

SESSION_TTL = timedelta(seconds=604800)

_emails_adapter = TypeAdapter(list[GitHubUserEmail])


def select_primary_email(emails: Iterable[GitHubUserEmail]) -> Optional[str]:
    """Return the first email that is both primary and verified."""
    for entry in emails:
        if entry.primary and entry.verified:
            return entry.email
    return None


def callback_url_for(request: FlowRequest) -> str:
    """
    Derive the callback URL from a start request.

    Raises:
        ConfigError: If the Host header is missing or the path is not a
            start path.
    """
    host = _require_host(request)
    path = request.path
    if not path or not path.endswith(START_SUFFIX):
        raise ConfigError("request path is not a login start path", details={"path": path})
    return f"https://{host}{path[:-len(START_SUFFIX)]}{CALLBACK_SUFFIX}"


def _require_host(request: FlowRequest) -> str:
    host = (request.host or "").strip()
    if not host:
        raise ConfigError("no header: host")
    return host


class GitHubOAuthFlow:
    """
    Coordinates the GitHub login and materializes the resulting session.

    The flow only creates sessions; it never reads or changes existing ones.

    Attributes:
        secrets: Resolves the OAuth client id and secret by parameter name
        http: Shared client for the token and profile requests
        sessions: Where new sessions are stored
        client_id_param: Parameter name of the client id
        client_secret_param: Parameter name of the client secret
        session_ttl: Lifetime of a created session
        protected_path: Where users land after logging in
    """

    def __init__(
        self,
        secrets: SecretProvider,
        http: httpx.AsyncClient,
        sessions: SessionStore,
        client_id_param: Optional[str],
        client_secret_param: Optional[str],
        session_ttl: timedelta = SESSION_TTL,
        protected_path: str = "/protected",
    ):
        self.secrets = secrets
        self.http = http
        self.sessions = sessions
        self.client_id_param = client_id_param
        self.client_secret_param = client_secret_param
        self.session_ttl = session_ttl
        self.protected_path = protected_path

    async def _client_credentials(self) -> tuple[str, str]:
        # Fetched on every invocation, never cached
        if not self.client_id_param or not self.client_secret_param:
            raise ConfigError("OAuth client parameter names are not configured")

        values = await self.secrets.get_secrets(
            [self.client_id_param, self.client_secret_param]
        )
        return values[self.client_id_param], values[self.client_secret_param]

    @staticmethod
    def authorization_url(client_id: str, redirect_uri: str, state: str) -> str:
        query = urlencode({
            "response_type": "code",
            "client_id": client_id,
            "state": state,
            "redirect_uri": redirect_uri,
            "scope": REQUIRED_SCOPE,
        })
        return f"{GITHUB_AUTH_URL}?{query}"

    async def redirect_to_provider(self, request: FlowRequest) -> RedirectResponse:
        """
        Start the login by redirecting the browser to GitHub.

        No session or cookie is touched.

        Raises:
            ConfigError: Missing Host header, a path that is not a start
                path, or unset client credentials.
        """
        callback_url = callback_url_for(request)
        logger.info("OAuth start", extra={"extra_data": {"callback_url": callback_url}})

        client_id, _client_secret = await self._client_credentials()

        # TODO: bind the state token to the browser and check it in
        # handle_callback once a storage mechanism for it is chosen.
        state = secrets.token_urlsafe(16)

        return RedirectResponse(
            url=self.authorization_url(client_id, callback_url, state),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    async def handle_callback(self, request: FlowRequest) -> RedirectResponse:
        """
        Finish the login: exchange the code, pick the user's email, create
        a session and redirect to the protected resource with its cookie.

        The cookie is delivered both as a Set-Cookie header and as the
        ``session`` query parameter of the redirect.

        Raises:
            ConfigError: Missing Host header or client credentials.
            AuthError: Missing code or state, wrong token scope, or no primary
                verified email.
            ProviderError: Token exchange or profile fetch failed.
            StoreError: The session could not be stored.
        """
        try:
            return await self._handle_callback(request)
        except (ConfigError, AuthError, ProviderError, StoreError) as e:
            log_auth_event("login", "failure", reason=e.error_code.value,
                           details={"message": e.message})
            raise

    async def _handle_callback(self, request: FlowRequest) -> RedirectResponse:
        host = _require_host(request)
        client_id, client_secret = await self._client_credentials()

        code = request.query_params.get("code")
        if not code:
            raise AuthError("No code")
        # Must be present; not compared against the value issued at start
        if not request.query_params.get("state"):
            raise AuthError("no state")

        token = await self._exchange_code(code, client_id, client_secret)
        if token.scope != REQUIRED_SCOPE:
            raise AuthError("No email scope", details={"scope": token.scope})

        emails = await self._fetch_emails(token.access_token)
        email = select_primary_email(emails)
        if email is None:
            raise AuthError("no primary email")

        session = Session()
        session.insert("user", User(email=email))
        session.expire_in(self.session_ttl)

        cookie = await self.sessions.store(session)
        if not cookie:
            raise StoreError("failed to store session")

        log_auth_event("login", "success")

        location = f"https://{host}{request.stage}{self.protected_path}?{urlencode({'session': cookie})}"
        return RedirectResponse(
            url=location,
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            headers={"Set-Cookie": format_set_cookie(cookie, COOKIE_NAME)},
        )

    async def _exchange_code(
        self, code: str, client_id: str, client_secret: str
    ) -> GitHubTokenResponse:
        try:
            response = await self.http.post(
                GITHUB_TOKEN_URL,
                headers={"Accept": "application/json"},
                data={
                    "code": code,
                    "client_id": client_id,
                    "client_secret": client_secret,
                },
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise ProviderError("token exchange failed", details={"error": type(e).__name__}) from e
        except ValueError as e:
            raise ProviderError("token response is not JSON") from e

        if isinstance(body, dict) and "error" in body:
            # GitHub reports a bad or reused code with 200 and an error body
            raise ProviderError("token exchange rejected", details={"error": body["error"]})

        try:
            return GitHubTokenResponse.model_validate(body)
        except ValidationError as e:
            raise ProviderError("token response could not be decoded") from e

    async def _fetch_emails(self, access_token: str) -> list[GitHubUserEmail]:
        try:
            response = await self.http.get(
                GITHUB_EMAILS_URL,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                },
            )
            response.raise_for_status()
            return _emails_adapter.validate_python(response.json())
        except httpx.HTTPError as e:
            raise ProviderError("email fetch failed", details={"error": type(e).__name__}) from e
        except ValueError as e:
            # Covers JSON decode errors and pydantic ValidationError
            raise ProviderError("email response could not be decoded") from e

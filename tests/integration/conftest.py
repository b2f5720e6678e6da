"""
Integration test configuration and fixtures.

The gateway app runs in-process behind a TestClient. GitHub is replaced by
an httpx.MockTransport, SSM by a static secret provider and the session
table by the in-memory key-value store, so the whole login flow runs
without network access.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from config.settings import Environment, Settings
from main import create_app
from oauth.github import GITHUB_EMAILS_URL, GITHUB_TOKEN_URL
from params.provider import StaticSecretProvider
from storage.memory_store import InMemoryKeyValueStore

logger = logging.getLogger(__name__)

TEST_SIGNING_KEY = "integration-signing-key-0123456789abcdef"
CLIENT_ID_PARAM = "/test/github/client_id"
CLIENT_SECRET_PARAM = "/test/github/client_secret"


@dataclass
class FakeGitHubConfig:
    """
    Canned GitHub responses for one test.

    Tests mutate the fields to drive the failure branches of the callback.
    """
    access_token: str = "gho_integration"
    scope: str = "user:email"
    token_status: int = 200
    emails: List[Dict[str, Any]] = field(default_factory=lambda: [
        {"email": "octocat@example.com", "primary": True, "verified": True},
        {"email": "octocat@users.noreply.github.com", "primary": False, "verified": True},
    ])
    emails_status: int = 200
    requests: List[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == GITHUB_TOKEN_URL:
            return httpx.Response(self.token_status, json={
                "access_token": self.access_token,
                "scope": self.scope,
                "token_type": "bearer",
            })
        if url == GITHUB_EMAILS_URL:
            return httpx.Response(self.emails_status, json=self.emails)
        return httpx.Response(404)


@pytest.fixture
def github() -> FakeGitHubConfig:
    return FakeGitHubConfig()


@pytest.fixture
def gateway_settings() -> Settings:
    return Settings(
        environment=Environment.DEVELOPMENT,
        session_store_type="memory",
        session_signing_key=TEST_SIGNING_KEY,
        github_client_id_param=CLIENT_ID_PARAM,
        github_client_secret_param=CLIENT_SECRET_PARAM,
        _env_file=None,
    )


@pytest.fixture
def table() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def client(gateway_settings, table, github):
    """TestClient over the gateway with the lifespan running."""
    app = create_app(
        gateway_settings,
        kv_store=table,
        secret_provider=StaticSecretProvider({
            CLIENT_ID_PARAM: "integration-client-id",
            CLIENT_SECRET_PARAM: "integration-client-secret",
        }),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(github.handler)),
    )
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client

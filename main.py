from contextlib import asynccontextmanager
from datetime import timedelta
from html import escape
from typing import Any, Optional
import logging

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from authorizer.verifier import SessionVerifier
from config.settings import Settings, get_settings
from errors.exceptions import resource_not_found
from errors.handlers import register_exception_handlers
from middleware.request_id import RequestIDMiddleware
from oauth.github import GitHubOAuthFlow
from oauth.models import FlowRequest
from params.provider import SecretProvider
from params.ssm import SsmSecretProvider
from session.cookie import COOKIE_NAME, CookieCodec
from session.kv_store import KeyValueSessionStore
from storage.factory import create_key_value_store
from storage.store import KeyValueStore
from telemetry.service import initialize_telemetry

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = {"github"}
FLOW_ACTIONS = {"start", "callback"}


class AuthorizeRequest(BaseModel):
    cookies: list[str] = Field(default_factory=list)


class AuthorizeResponse(BaseModel):
    """Simple-response shape expected by API Gateway request authorizers."""
    model_config = ConfigDict(populate_by_name=True)

    is_authorized: bool = Field(alias="isAuthorized")
    context: dict[str, Any] = Field(default_factory=dict)


def split_cookie_header(header: Optional[str]) -> list[str]:
    """Split a Cookie header into ``name=value`` entries."""
    if not header:
        return []
    return [part.strip() for part in header.split(";") if part.strip()]


def create_app(
    settings: Optional[Settings] = None,
    *,
    kv_store: Optional[KeyValueStore] = None,
    secret_provider: Optional[SecretProvider] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Capabilities passed in are used as-is and left open on shutdown; the
    ones not passed in are created from settings in the lifespan and
    closed with it.
    """
    settings = settings or get_settings()
    initialize_telemetry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting session gateway", extra={
            "extra_data": {"environment": settings.environment.value}
        })

        kv = kv_store if kv_store is not None else await create_key_value_store(settings)
        secrets = (
            secret_provider if secret_provider is not None
            else SsmSecretProvider(region_name=settings.aws_region)
        )
        http = http_client if http_client is not None else httpx.AsyncClient(
            timeout=settings.http_timeout_seconds,
            headers={"User-Agent": settings.http_user_agent},
        )

        sessions = KeyValueSessionStore(
            kv, CookieCodec(settings.session_signing_key.get_secret_value())
        )
        app.state.sessions = sessions
        app.state.verifier = SessionVerifier(sessions)
        app.state.github = GitHubOAuthFlow(
            secrets=secrets,
            http=http,
            sessions=sessions,
            client_id_param=settings.github_client_id_param,
            client_secret_param=settings.github_client_secret_param,
            session_ttl=timedelta(seconds=settings.session_ttl_seconds),
            protected_path=settings.protected_path,
        )

        yield

        logger.info("Shutting down session gateway")
        if http_client is None:
            await http.aclose()
        if kv_store is None:
            await kv.close()

    app = FastAPI(title="Session Gateway", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    register_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)

    def get_flow(request: Request) -> GitHubOAuthFlow:
        return request.app.state.github

    def get_verifier(request: Request) -> SessionVerifier:
        return request.app.state.verifier

    @app.get("/login/{provider}/{action}")
    async def login(
        provider: str,
        action: str,
        request: Request,
        flow: GitHubOAuthFlow = Depends(get_flow),
    ) -> RedirectResponse:
        """Route a login step to the provider's flow."""
        if provider not in SUPPORTED_PROVIDERS or action not in FLOW_ACTIONS:
            raise resource_not_found(
                "Unknown login route",
                details={"provider": provider, "action": action}
            )

        flow_request = FlowRequest.from_request(request, stage=settings.api_stage)
        if action == "start":
            return await flow.redirect_to_provider(flow_request)
        return await flow.handle_callback(flow_request)

    @app.post("/authorize", response_model=AuthorizeResponse, response_model_by_alias=True)
    async def authorize(
        body: AuthorizeRequest,
        verifier: SessionVerifier = Depends(get_verifier),
    ) -> AuthorizeResponse:
        decision = await verifier.verify(body.cookies)
        return AuthorizeResponse(is_authorized=decision.is_authorized, context=decision.context)

    @app.get(settings.protected_path, response_class=HTMLResponse)
    async def protected(
        request: Request,
        verifier: SessionVerifier = Depends(get_verifier),
    ) -> HTMLResponse:
        cookies = split_cookie_header(request.headers.get("cookie"))
        # The login callback also hands the cookie over as ?session=
        session_param = request.query_params.get("session")
        if session_param:
            cookies.insert(0, f"{COOKIE_NAME}={session_param}")

        decision = await verifier.verify(cookies)
        if not decision.is_authorized:
            return HTMLResponse("<p>Forbidden</p>", status_code=403)
        return HTMLResponse(f"<h1>hello {escape(decision.context['email'])}</h1>")

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)

"""
Request and provider response models for the GitHub login flow.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from fastapi import Request
from pydantic import BaseModel


@dataclass(frozen=True)
class FlowRequest:
    """
    What the routing layer hands the login flow for one invocation.

    Attributes:
        host: Value of the Host header, or None if absent
        path: Raw request path, e.g. "/login/github/start"
        query_params: Query string parameters (first value per name)
        stage: API stage prefix for the post-login redirect, "" or "/dev"
    """
    host: Optional[str]
    path: Optional[str]
    query_params: Mapping[str, str] = field(default_factory=dict)
    stage: str = ""

    @classmethod
    def from_request(cls, request: Request, stage: str = "") -> "FlowRequest":
        return cls(
            host=request.headers.get("host"),
            path=request.url.path,
            query_params=dict(request.query_params),
            stage=stage,
        )


class GitHubTokenResponse(BaseModel):
    """Body of a successful access token exchange."""
    access_token: str
    scope: str
    token_type: str


class GitHubUserEmail(BaseModel):
    """One entry of the authenticated user's email list."""
    email: str
    primary: bool
    verified: bool

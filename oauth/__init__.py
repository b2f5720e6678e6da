"""
OAuth2 authorization-code login against GitHub.
"""

from oauth.models import FlowRequest, GitHubTokenResponse, GitHubUserEmail
from oauth.github import (
    GITHUB_AUTH_URL,
    GITHUB_EMAILS_URL,
    GITHUB_TOKEN_URL,
    REQUIRED_SCOPE,
    GitHubOAuthFlow,
    callback_url_for,
    select_primary_email,
)

__all__ = [
    "FlowRequest",
    "GitHubTokenResponse",
    "GitHubUserEmail",
    "GITHUB_AUTH_URL",
    "GITHUB_EMAILS_URL",
    "GITHUB_TOKEN_URL",
    "REQUIRED_SCOPE",
    "GitHubOAuthFlow",
    "callback_url_for",
    "select_primary_email",
]

"""
Session-cookie authorizer.
"""

from authorizer.verifier import AuthorizerDecision, SessionVerifier, find_session_cookie

__all__ = ["AuthorizerDecision", "SessionVerifier", "find_session_cookie"]

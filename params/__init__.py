"""
Secret retrieval for OAuth client credentials.
"""

from params.provider import SecretProvider, StaticSecretProvider
from params.ssm import SsmSecretProvider

__all__ = ["SecretProvider", "StaticSecretProvider", "SsmSecretProvider"]

"""
Secret capability used by the login flow.

The flow only ever asks for a secret by name; where the value lives (SSM
Parameter Store in production, a dict in development and tests) is the
provider's concern.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from errors.exceptions import ConfigError


class SecretProvider(ABC):
    """Resolves secret values by name."""

    @abstractmethod
    async def get_secret(self, name: str) -> str:
        """
        Resolve one secret.

        Raises:
            ConfigError: If the secret does not exist, is empty, or cannot
                be retrieved.
        """
        pass

    async def get_secrets(self, names: Sequence[str]) -> dict[str, str]:
        """
        Resolve several secrets at once.

        The default implementation fetches them concurrently; providers
        with a batch API override this to use one round-trip.

        Raises:
            ConfigError: If any of the secrets cannot be resolved.
        """
        values = await asyncio.gather(*(self.get_secret(name) for name in names))
        return dict(zip(names, values))


class StaticSecretProvider(SecretProvider):
    """SecretProvider over a fixed mapping."""

    def __init__(self, secrets: Mapping[str, str]):
        self._secrets = dict(secrets)

    async def get_secret(self, name: str) -> str:
        value = self._secrets.get(name)
        if not value:
            raise ConfigError("secret not set", details={"name": name})
        return value

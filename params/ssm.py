"""
SSM Parameter Store secret provider.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from errors.exceptions import ConfigError
from params.provider import SecretProvider

logger = logging.getLogger(__name__)

# GetParameters accepts at most ten names per call
MAX_NAMES_PER_CALL = 10


class SsmSecretProvider(SecretProvider):
    """
    Reads SecureString parameters with decryption.

    Values are fetched on every call and never cached, so rotated OAuth
    credentials take effect on the next login.
    """

    def __init__(self, region_name: Optional[str] = None, client: Optional[Any] = None):
        self._client = client or boto3.client("ssm", region_name=region_name)

    async def get_secret(self, name: str) -> str:
        values = await self.get_secrets([name])
        return values[name]

    async def get_secrets(self, names: Sequence[str]) -> dict[str, str]:
        if not names:
            return {}
        if len(names) > MAX_NAMES_PER_CALL:
            raise ValueError(f"at most {MAX_NAMES_PER_CALL} parameters per call")

        try:
            response = await asyncio.to_thread(
                self._client.get_parameters,
                Names=list(names),
                WithDecryption=True,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "SSM get_parameters failed",
                extra={"extra_data": {"names": list(names), "error": str(e)}}
            )
            raise ConfigError(
                "could not read parameters", details={"names": list(names)}
            ) from e

        # Parameters come back in no particular order; match on name
        values = {
            parameter["Name"]: parameter.get("Value")
            for parameter in response.get("Parameters", [])
        }
        missing = [name for name in names if not values.get(name)]
        if missing:
            raise ConfigError("parameters not set", details={"names": missing})

        return {name: values[name] for name in names}

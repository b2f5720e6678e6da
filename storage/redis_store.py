"""
Redis-based key-value store implementation.

Each partition is one Redis hash named ``<prefix><partition key>``; the
sort key is the hash field and the item is stored JSON-serialized as the
field value. HSET, HGET, HGETALL and HDEL give the single-key and
whole-partition access the session store needs.
"""

import json
import logging
from typing import Optional

from redis.exceptions import RedisError

from errors.exceptions import StoreError
from storage.store import Item, KeyValueStore, PARTITION_KEY, SORT_KEY

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed KeyValueStore.

    Attributes:
        redis_url: Redis connection URL (e.g., "redis://localhost:6379/0")
        key_prefix: Prefix for partition hash names
        client: Redis async client instance (initialized via connect())
    """

    def __init__(self, redis_url: str, key_prefix: str = "kv:"):
        """
        Initialize the Redis key-value store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace prefix for partition hashes
        """
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.client = None

    async def connect(self) -> None:
        """
        Establish connection to Redis.

        This method must be called before using any other methods.
        """
        import redis.asyncio as redis
        self.client = redis.from_url(self.redis_url, decode_responses=True)

    async def close(self) -> None:
        """Close the Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None

    def _get_key(self, partition_key: str) -> str:
        return f"{self.key_prefix}{partition_key}"

    def _require_client(self):
        if not self.client:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self.client

    async def put_item(self, item: Item) -> None:
        client = self._require_client()
        try:
            partition_key = item[PARTITION_KEY]
            sort_key = item[SORT_KEY]
        except KeyError as e:
            raise StoreError(f"item is missing key attribute {e.args[0]}") from e

        try:
            await client.hset(self._get_key(partition_key), sort_key, json.dumps(item))
        except RedisError as e:
            raise self._store_error("put_item", e) from e

    async def get_item(self, partition_key: str, sort_key: str) -> Optional[Item]:
        client = self._require_client()
        try:
            data = await client.hget(self._get_key(partition_key), sort_key)
        except RedisError as e:
            raise self._store_error("get_item", e) from e

        if data is None:
            return None
        return self._decode(data)

    async def query(
        self,
        partition_key: str,
        sort_key_prefix: Optional[str] = None
    ) -> list[Item]:
        client = self._require_client()
        try:
            fields = await client.hgetall(self._get_key(partition_key))
        except RedisError as e:
            raise self._store_error("query", e) from e

        return [
            self._decode(data)
            for sort_key, data in sorted(fields.items())
            if sort_key_prefix is None or sort_key.startswith(sort_key_prefix)
        ]

    async def delete_item(self, partition_key: str, sort_key: str) -> None:
        client = self._require_client()
        try:
            # HDEL returns 0 for a missing field
            await client.hdel(self._get_key(partition_key), sort_key)
        except RedisError as e:
            raise self._store_error("delete_item", e) from e

    @staticmethod
    def _decode(data: str) -> Item:
        try:
            return json.loads(data)
        except ValueError as e:
            raise StoreError("stored item is not valid JSON") from e

    @staticmethod
    def _store_error(operation: str, error: Exception) -> StoreError:
        logger.error(
            f"Redis {operation} failed",
            extra={"extra_data": {"error": str(error)}}
        )
        return StoreError(f"Redis {operation} failed", details={"operation": operation})

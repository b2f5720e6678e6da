"""
Backend selection for the key-value store.
"""

import logging

from config.settings import Environment, Settings
from storage.dynamodb_store import DynamoDBKeyValueStore
from storage.memory_store import InMemoryKeyValueStore
from storage.redis_store import RedisKeyValueStore
from storage.store import KeyValueStore

logger = logging.getLogger(__name__)


async def create_key_value_store(settings: Settings) -> KeyValueStore:
    """
    Build and connect the backend named by settings.session_store_type.

    In development a backend without its table name or URL falls back to
    the in-memory store; Settings validation rejects that case elsewhere.
    """
    store_type = settings.session_store_type

    if store_type == "dynamodb" and settings.table_name:
        logger.info(
            "Using DynamoDB session table",
            extra={"extra_data": {"table": settings.table_name}}
        )
        return DynamoDBKeyValueStore(settings.table_name, region_name=settings.aws_region)

    if store_type == "redis" and settings.redis_url:
        store = RedisKeyValueStore(settings.redis_url, key_prefix=settings.redis_key_prefix)
        await store.connect()
        logger.info("Using Redis session store")
        return store

    if store_type != "memory" and settings.environment != Environment.DEVELOPMENT:
        # Unreachable with validated Settings
        raise ValueError(f"session store '{store_type}' is not configured")

    logger.warning(
        "Using in-memory session store; sessions are lost on restart",
        extra={"extra_data": {"requested_store": store_type}}
    )
    return InMemoryKeyValueStore()

"""
Key-value storage backends.

The session store talks to durable storage only through the KeyValueStore
contract: put, get, query-by-partition and delete, addressed by a partition
key and a sort key.
"""

from storage.store import KeyValueStore, Item, PARTITION_KEY, SORT_KEY
from storage.memory_store import InMemoryKeyValueStore
from storage.dynamodb_store import DynamoDBKeyValueStore
from storage.redis_store import RedisKeyValueStore
from storage.factory import create_key_value_store

__all__ = [
    "KeyValueStore",
    "Item",
    "PARTITION_KEY",
    "SORT_KEY",
    "InMemoryKeyValueStore",
    "DynamoDBKeyValueStore",
    "RedisKeyValueStore",
    "create_key_value_store",
]

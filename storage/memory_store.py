"""
In-memory key-value store.

Used in development when no DynamoDB table or Redis URL is configured, and
as the binding for tests. Items are copied on the way in and out so callers
cannot mutate stored state by reference.
"""

import copy
from typing import Optional

from errors.exceptions import StoreError
from storage.store import Item, KeyValueStore, PARTITION_KEY, SORT_KEY


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local KeyValueStore keyed by partition, then sort key."""

    def __init__(self):
        self._partitions: dict[str, dict[str, Item]] = {}

    async def put_item(self, item: Item) -> None:
        try:
            partition_key = item[PARTITION_KEY]
            sort_key = item[SORT_KEY]
        except KeyError as e:
            raise StoreError(f"item is missing key attribute {e.args[0]}") from e
        self._partitions.setdefault(partition_key, {})[sort_key] = copy.deepcopy(item)

    async def get_item(self, partition_key: str, sort_key: str) -> Optional[Item]:
        item = self._partitions.get(partition_key, {}).get(sort_key)
        return copy.deepcopy(item) if item is not None else None

    async def query(
        self,
        partition_key: str,
        sort_key_prefix: Optional[str] = None
    ) -> list[Item]:
        items = self._partitions.get(partition_key, {})
        return [
            copy.deepcopy(item)
            for sort_key, item in sorted(items.items())
            if sort_key_prefix is None or sort_key.startswith(sort_key_prefix)
        ]

    async def delete_item(self, partition_key: str, sort_key: str) -> None:
        self._partitions.get(partition_key, {}).pop(sort_key, None)

    def __len__(self) -> int:
        return sum(len(items) for items in self._partitions.values())

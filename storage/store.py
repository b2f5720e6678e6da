"""
Key-value store abstraction backing the session store.

Records are addressed by a two-part key: a partition key naming a logical
group and a sort key naming the record within it. The session layer keeps
every session in one partition so it can enumerate them, which is the only
access pattern it needs beyond single-key put/get/delete.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

PARTITION_KEY = "PK"
SORT_KEY = "SK"

Item = dict[str, Any]


class KeyValueStore(ABC):
    """
    Abstract base class for partition/sort key stores.

    Implementations must give read-after-write consistency on a single key.
    Nothing here is transactional across keys.

    All methods are async; every operational failure of the underlying
    store is raised as StoreError.
    """

    @abstractmethod
    async def put_item(self, item: Item) -> None:
        """
        Insert or overwrite an item.

        Args:
            item: Attribute mapping that includes PARTITION_KEY and SORT_KEY.
                An existing item with the same key is replaced.

        Raises:
            StoreError: If the write fails.
        """
        pass

    @abstractmethod
    async def get_item(self, partition_key: str, sort_key: str) -> Optional[Item]:
        """
        Fetch a single item by its full key.

        Returns:
            The item's attributes, or None if no such item exists.

        Raises:
            StoreError: If the read fails.
        """
        pass

    @abstractmethod
    async def query(
        self,
        partition_key: str,
        sort_key_prefix: Optional[str] = None
    ) -> list[Item]:
        """
        List the items of a partition.

        Args:
            partition_key: Partition to enumerate.
            sort_key_prefix: If given, only items whose sort key starts
                with this prefix are returned.

        Raises:
            StoreError: If the query fails.
        """
        pass

    @abstractmethod
    async def delete_item(self, partition_key: str, sort_key: str) -> None:
        """
        Delete an item by its full key.

        Deleting a key that does not exist is not an error.

        Raises:
            StoreError: If the delete fails.
        """
        pass

    async def close(self) -> None:
        """Release connections held by the backend, if any."""
        return None

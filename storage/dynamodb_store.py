"""
DynamoDB-backed key-value store.

The table uses a composite primary key with string attributes ``PK``
(partition) and ``SK`` (sort). boto3 is synchronous, so every call runs in
a worker thread to keep the event loop free.
"""

import asyncio
import logging
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from errors.exceptions import StoreError
from storage.store import Item, KeyValueStore, PARTITION_KEY, SORT_KEY

logger = logging.getLogger(__name__)


class DynamoDBKeyValueStore(KeyValueStore):
    """
    KeyValueStore over a single DynamoDB table.

    Attributes:
        table_name: Name of the DynamoDB table
    """

    def __init__(
        self,
        table_name: str,
        *,
        region_name: Optional[str] = None,
        boto3_resource: Optional[Any] = None,
    ) -> None:
        """
        Args:
            table_name: DynamoDB table holding the records.
            region_name: AWS region; None uses the default boto3 chain.
            boto3_resource: Pre-built DynamoDB resource, mainly for tests.
        """
        self.table_name = table_name
        resource = boto3_resource or boto3.resource("dynamodb", region_name=region_name)
        self._table = resource.Table(table_name)

    async def _call(self, operation: str, func, **kwargs) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(func, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"DynamoDB {operation} failed",
                extra={"extra_data": {"table": self.table_name, "error": str(e)}}
            )
            raise StoreError(
                f"DynamoDB {operation} failed",
                details={"table": self.table_name, "operation": operation},
            ) from e

    async def put_item(self, item: Item) -> None:
        if PARTITION_KEY not in item or SORT_KEY not in item:
            raise StoreError("item is missing key attributes")
        await self._call("put_item", self._table.put_item, Item=item)

    async def get_item(self, partition_key: str, sort_key: str) -> Optional[Item]:
        response = await self._call(
            "get_item",
            self._table.get_item,
            Key={PARTITION_KEY: partition_key, SORT_KEY: sort_key},
            ConsistentRead=True,
        )
        return response.get("Item")

    async def query(
        self,
        partition_key: str,
        sort_key_prefix: Optional[str] = None
    ) -> list[Item]:
        condition = Key(PARTITION_KEY).eq(partition_key)
        if sort_key_prefix:
            condition = condition & Key(SORT_KEY).begins_with(sort_key_prefix)

        items: list[Item] = []
        kwargs: dict[str, Any] = {"KeyConditionExpression": condition}
        while True:
            response = await self._call("query", self._table.query, **kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def delete_item(self, partition_key: str, sort_key: str) -> None:
        # DeleteItem on a missing key succeeds
        await self._call(
            "delete_item",
            self._table.delete_item,
            Key={PARTITION_KEY: partition_key, SORT_KEY: sort_key},
        )

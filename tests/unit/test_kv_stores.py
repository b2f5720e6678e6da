"""
Unit tests for the key-value backends.

DynamoDB and Redis clients are mocked; the in-memory store is exercised
directly.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from redis.exceptions import ConnectionError as RedisConnectionError

from config.settings import Environment, Settings
from errors.exceptions import StoreError
from storage.dynamodb_store import DynamoDBKeyValueStore
from storage.factory import create_key_value_store
from storage.memory_store import InMemoryKeyValueStore
from storage.redis_store import RedisKeyValueStore

SIGNING_KEY = "kv-test-signing-key-0123456789abcdef0123"


def client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


class TestInMemoryKeyValueStore:

    @pytest.mark.asyncio
    async def test_put_get_delete(self):
        store = InMemoryKeyValueStore()
        await store.put_item({"PK": "P", "SK": "a", "v": 1})

        assert await store.get_item("P", "a") == {"PK": "P", "SK": "a", "v": 1}

        await store.delete_item("P", "a")
        assert await store.get_item("P", "a") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self):
        await InMemoryKeyValueStore().delete_item("P", "missing")

    @pytest.mark.asyncio
    async def test_returned_items_are_copies(self):
        store = InMemoryKeyValueStore()
        await store.put_item({"PK": "P", "SK": "a", "v": {"n": 1}})

        item = await store.get_item("P", "a")
        item["v"]["n"] = 2

        assert (await store.get_item("P", "a"))["v"] == {"n": 1}

    @pytest.mark.asyncio
    async def test_query_filters_by_prefix(self):
        store = InMemoryKeyValueStore()
        for sort_key in ("b1", "a1", "b2"):
            await store.put_item({"PK": "P", "SK": sort_key})
        await store.put_item({"PK": "Q", "SK": "b3"})

        assert [i["SK"] for i in await store.query("P")] == ["a1", "b1", "b2"]
        assert [i["SK"] for i in await store.query("P", "b")] == ["b1", "b2"]

    @pytest.mark.asyncio
    async def test_put_without_keys_raises(self):
        with pytest.raises(StoreError):
            await InMemoryKeyValueStore().put_item({"PK": "P"})


class TestDynamoDBKeyValueStore:

    @pytest.fixture
    def store(self, mock_dynamodb_table):
        resource = MagicMock()
        resource.Table.return_value = mock_dynamodb_table
        return DynamoDBKeyValueStore("sessions", boto3_resource=resource)

    @pytest.mark.asyncio
    async def test_put_item(self, store, mock_dynamodb_table):
        item = {"PK": "SESSION", "SK": "abc", "session": "{}"}
        await store.put_item(item)

        mock_dynamodb_table.put_item.assert_called_once_with(Item=item)

    @pytest.mark.asyncio
    async def test_get_item_uses_consistent_read(self, store, mock_dynamodb_table):
        mock_dynamodb_table.get_item.return_value = {"Item": {"PK": "SESSION", "SK": "abc"}}

        item = await store.get_item("SESSION", "abc")

        assert item == {"PK": "SESSION", "SK": "abc"}
        mock_dynamodb_table.get_item.assert_called_once_with(
            Key={"PK": "SESSION", "SK": "abc"}, ConsistentRead=True
        )

    @pytest.mark.asyncio
    async def test_get_missing_item(self, store):
        assert await store.get_item("SESSION", "missing") is None

    @pytest.mark.asyncio
    async def test_query_follows_pagination(self, store, mock_dynamodb_table):
        mock_dynamodb_table.query.side_effect = [
            {"Items": [{"SK": "a"}], "LastEvaluatedKey": {"PK": "SESSION", "SK": "a"}},
            {"Items": [{"SK": "b"}]},
        ]

        items = await store.query("SESSION")

        assert [i["SK"] for i in items] == ["a", "b"]
        second_call = mock_dynamodb_table.query.call_args_list[1]
        assert second_call.kwargs["ExclusiveStartKey"] == {"PK": "SESSION", "SK": "a"}

    @pytest.mark.asyncio
    async def test_delete_item(self, store, mock_dynamodb_table):
        await store.delete_item("SESSION", "abc")

        mock_dynamodb_table.delete_item.assert_called_once_with(
            Key={"PK": "SESSION", "SK": "abc"}
        )

    @pytest.mark.asyncio
    async def test_client_error_becomes_store_error(self, store, mock_dynamodb_table):
        mock_dynamodb_table.get_item.side_effect = client_error("GetItem")

        with pytest.raises(StoreError) as exc_info:
            await store.get_item("SESSION", "abc")

        assert exc_info.value.details["operation"] == "get_item"


class TestRedisKeyValueStore:

    @pytest.fixture
    def store(self, mock_redis):
        store = RedisKeyValueStore("redis://localhost:6379/0", key_prefix="test:")
        store.client = mock_redis
        return store

    @pytest.mark.asyncio
    async def test_put_item_writes_partition_hash(self, store, mock_redis):
        await store.put_item({"PK": "SESSION", "SK": "abc", "session": "{}"})

        args = mock_redis.hset.call_args[0]
        assert args[0] == "test:SESSION"
        assert args[1] == "abc"

    @pytest.mark.asyncio
    async def test_get_item_decodes_json(self, store, mock_redis):
        mock_redis.hget.return_value = '{"PK": "SESSION", "SK": "abc"}'

        assert await store.get_item("SESSION", "abc") == {"PK": "SESSION", "SK": "abc"}
        mock_redis.hget.assert_called_once_with("test:SESSION", "abc")

    @pytest.mark.asyncio
    async def test_get_missing_item(self, store):
        assert await store.get_item("SESSION", "missing") is None

    @pytest.mark.asyncio
    async def test_query_with_prefix(self, store, mock_redis):
        mock_redis.hgetall.return_value = {
            "b": '{"SK": "b"}',
            "a": '{"SK": "a"}',
            "c": '{"SK": "c"}',
        }

        assert [i["SK"] for i in await store.query("SESSION")] == ["a", "b", "c"]
        assert [i["SK"] for i in await store.query("SESSION", "b")] == ["b"]

    @pytest.mark.asyncio
    async def test_delete_item(self, store, mock_redis):
        await store.delete_item("SESSION", "abc")
        mock_redis.hdel.assert_called_once_with("test:SESSION", "abc")

    @pytest.mark.asyncio
    async def test_redis_error_becomes_store_error(self, store, mock_redis):
        mock_redis.hget.side_effect = RedisConnectionError("down")

        with pytest.raises(StoreError):
            await store.get_item("SESSION", "abc")

    @pytest.mark.asyncio
    async def test_invalid_json_becomes_store_error(self, store, mock_redis):
        mock_redis.hget.return_value = "{not json"

        with pytest.raises(StoreError):
            await store.get_item("SESSION", "abc")

    @pytest.mark.asyncio
    async def test_requires_connect(self):
        store = RedisKeyValueStore("redis://localhost:6379/0")

        with pytest.raises(RuntimeError):
            await store.get_item("SESSION", "abc")

    @pytest.mark.asyncio
    async def test_close_releases_client(self, store, mock_redis):
        await store.close()

        mock_redis.aclose.assert_awaited_once()
        assert store.client is None


class TestCreateKeyValueStore:

    @pytest.mark.asyncio
    async def test_development_without_table_uses_memory(self):
        settings = Settings(
            environment=Environment.DEVELOPMENT,
            session_signing_key=SIGNING_KEY,
            _env_file=None,
        )

        store = await create_key_value_store(settings)

        assert isinstance(store, InMemoryKeyValueStore)

    @pytest.mark.asyncio
    async def test_table_name_selects_dynamodb(self, monkeypatch):
        resource = MagicMock()
        monkeypatch.setattr("storage.dynamodb_store.boto3.resource", lambda *a, **kw: resource)
        settings = Settings(
            environment=Environment.DEVELOPMENT,
            session_signing_key=SIGNING_KEY,
            table_name="sessions",
            _env_file=None,
        )

        store = await create_key_value_store(settings)

        assert isinstance(store, DynamoDBKeyValueStore)
        resource.Table.assert_called_once_with("sessions")

"""Tests for Redis-backed sequence allocation and scope validation."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError, TimeoutError

from errors import StoreFailure
from scope_validator import application_exists, chat_exists
from sequencer import allocate, initialize_counter


class TestAllocate:
    def test_first_allocation_is_one(self, run):
        assert run(lambda r: allocate(r, "application:abc:last_chat_number")) == 1

    def test_continues_from_existing_value(self, run, store):
        store.set("application:abc:last_chat_number", 41)

        assert run(lambda r: allocate(r, "application:abc:last_chat_number")) == 42
        assert store.get("application:abc:last_chat_number") == "42"

    def test_concurrent_allocations_are_dense(self, run, store):
        store.set("counter", 10)

        async def burst(r):
            return await asyncio.gather(*(allocate(r, "counter") for _ in range(100)))

        numbers = run(burst)

        assert sorted(numbers) == list(range(11, 111))

    def test_store_error_becomes_store_failure(self):
        r = AsyncMock()
        r.incr.side_effect = ConnectionError("connection refused")

        with pytest.raises(StoreFailure) as exc_info:
            asyncio.run(allocate(r, "counter"))

        assert exc_info.value.operation == "incrementing counter"
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestInitializeCounter:
    def test_sets_zero(self, run, store):
        run(lambda r: initialize_counter(r, "application:abc:chat:1"))

        assert store.get("application:abc:chat:1") == "0"

    def test_second_call_resets(self, run, store):
        store.set("application:abc:chat:1", 5)

        run(lambda r: initialize_counter(r, "application:abc:chat:1"))

        assert store.get("application:abc:chat:1") == "0"

    def test_store_error_becomes_store_failure(self):
        r = AsyncMock()
        r.set.side_effect = TimeoutError("timed out")

        with pytest.raises(StoreFailure):
            asyncio.run(initialize_counter(r, "application:abc:chat:1"))


class TestScopeValidator:
    def test_unknown_application(self, run):
        assert run(lambda r: application_exists(r, "ghost")) is False

    def test_presence_is_enough_even_at_zero(self, run, register_application):
        register_application("abc", chats_count=0)

        assert run(lambda r: application_exists(r, "abc")) is True

    def test_chat_exists_only_once_initialized(self, run, store):
        assert run(lambda r: chat_exists(r, "abc", 1)) is False

        store.set("application:abc:chat:1", 0)

        assert run(lambda r: chat_exists(r, "abc", 1)) is True
        assert run(lambda r: chat_exists(r, "abc", 2)) is False

    def test_store_error_is_not_reported_as_missing(self):
        r = AsyncMock()
        r.get.side_effect = ConnectionError("connection refused")
        r.exists.side_effect = ConnectionError("connection refused")

        with pytest.raises(StoreFailure):
            asyncio.run(application_exists(r, "abc"))
        with pytest.raises(StoreFailure):
            asyncio.run(chat_exists(r, "abc", 1))

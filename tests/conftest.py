"""
Shared fixtures: one in-memory Redis server per test, reachable through
both an async client (what the service uses) and a sync client (for
seeding and asserting on raw keys).
"""

import asyncio

import fakeredis
import fakeredis.aioredis
import pytest


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def store(fake_server):
    """Sync view of the same keyspace the service writes to."""
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture
def async_redis_factory(fake_server):
    # Async clients bind to the running loop, so build them inside it
    def factory(*_args):
        return fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)

    return factory


@pytest.fixture
def run(async_redis_factory):
    """Run `fn(redis)` to completion on a fresh event loop."""

    def _run(fn):
        async def go():
            r = async_redis_factory()
            try:
                return await fn(r)
            finally:
                await r.aclose()

        return asyncio.run(go())

    return _run


@pytest.fixture
def register_application(store):
    # Application provisioning happens elsewhere; it only leaves this key behind
    def _register(token, chats_count=0):
        store.set(f"application:{token}", chats_count)

    return _register

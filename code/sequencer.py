# Atomic sequence allocation on top of Redis INCR.
# Uniqueness and gaplessness come from Redis itself; there is no local locking.

from redis.asyncio import Redis
from redis.exceptions import RedisError

from errors import StoreFailure


async def allocate(r: Redis, key: str) -> int:
    # Missing keys start at 0, so the first allocation is 1
    try:
        return int(await r.incr(key))
    except RedisError as e:
        raise StoreFailure(f"incrementing {key}") from e


async def initialize_counter(r: Redis, key: str) -> None:
    # Unconditional SET: a second call resets the counter, so call it once per chat
    try:
        await r.set(key, 0)
    except RedisError as e:
        raise StoreFailure(f"initializing {key}") from e

# Existence checks for application and chat scopes.
# A missing key is a definitive "no"; Redis errors are never reported as missing.

from redis.asyncio import Redis
from redis.exceptions import RedisError

from errors import StoreFailure
from redis_schema import application_key, chat_key


async def application_exists(r: Redis, token: str) -> bool:
    key = application_key(token)
    try:
        return await r.get(key) is not None
    except RedisError as e:
        raise StoreFailure(f"validating application {token}") from e


async def chat_exists(r: Redis, token: str, chat_number: int) -> bool:
    key = chat_key(token, chat_number)
    try:
        return await r.exists(key) > 0
    except RedisError as e:
        raise StoreFailure(f"validating chat {chat_number} of application {token}") from e

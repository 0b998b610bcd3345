# Appends serialized jobs to the Redis list the Sidekiq worker pops from.
# No acknowledgement beyond Redis accepting the RPUSH.

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from errors import StoreFailure
from redis_schema import queue_key
from sidekiq_job import SidekiqJob

logger = logging.getLogger(__name__)


async def enqueue(r: Redis, queue_name: str, payload: str) -> None:
    key = queue_key(queue_name)
    try:
        await r.rpush(key, payload)
    except RedisError as e:
        raise StoreFailure(f"adding job to {key}") from e


async def enqueue_job(r: Redis, job: SidekiqJob) -> None:
    await enqueue(r, job.queue, job.to_json())
    logger.debug("Enqueued %s job %s on %s", job.job_class, job.jid, job.queue)

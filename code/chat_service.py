# Chat and message creation: validate scope, allocate a number, bump counters, enqueue.
# Steps are individual Redis atomics, not a transaction. A failure after allocation
# leaves a gap in the sequence; numbers are never reused or rolled back.

import asyncio
import logging

from redis.asyncio import Redis

from errors import InvalidInput, NotFound, StoreFailure
from models import Chat, Message
from queue_producer import enqueue_job
from redis_schema import (
    application_key, chat_key,
    last_chat_number_key, last_message_number_key,
)
from scope_validator import application_exists, chat_exists
from sequencer import allocate, initialize_counter
from sidekiq_job import chat_creation_job, message_creation_job, now_rfc3339_nano

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0


class ChatService:
    def __init__(self, r: Redis, request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.r = r
        self.request_timeout = request_timeout

    async def _with_deadline(self, coro):
        # Cancels whatever store call is in flight; committed writes stay as they are
        try:
            return await asyncio.wait_for(coro, timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            raise StoreFailure("request deadline exceeded") from e

    async def create_chat(self, token: str) -> Chat:
        if not token:
            raise InvalidInput("Application token is required")
        return await self._with_deadline(self._create_chat(token))

    async def create_message(self, token: str, chat_number: int, body: str) -> Message:
        if not token:
            raise InvalidInput("Application token is required")
        if chat_number is None:
            raise InvalidInput("Chat number is required")
        if not body:
            raise InvalidInput("Invalid request body: body is required")
        return await self._with_deadline(self._create_message(token, chat_number, body))

    async def _require_application(self, token: str) -> None:
        if not await application_exists(self.r, token):
            logger.info("Cache miss: application token %s not found", token)
            raise NotFound(f"Application with token {token} not found")

    async def _create_chat(self, token: str) -> Chat:
        await self._require_application(token)

        # 1) Allocate (after this point the number is consumed no matter what)
        number = await allocate(self.r, last_chat_number_key(token))

        try:
            # 2) Bump the app's chat count and open the chat for messages
            await allocate(self.r, application_key(token))
            await initialize_counter(self.r, chat_key(token, number))

            # 3) Hand off persistence to the worker
            chat = Chat(
                number=number,
                application_token=token,
                timestamp=now_rfc3339_nano(),
            )
            await enqueue_job(self.r, chat_creation_job(chat))
        except (StoreFailure, asyncio.CancelledError):
            logger.warning("Chat number %d of application %s consumed but not queued", number, token)
            raise

        return chat

    async def _create_message(self, token: str, chat_number: int, body: str) -> Message:
        await self._require_application(token)
        if not await chat_exists(self.r, token, chat_number):
            raise NotFound(f"Chat {chat_number} not found for application {token}")

        number = await allocate(self.r, last_message_number_key(token, chat_number))

        try:
            await allocate(self.r, chat_key(token, chat_number))

            message = Message(
                number=number,
                body=body,
                chat_number=chat_number,
                application_token=token,
                timestamp=now_rfc3339_nano(),
            )
            await enqueue_job(self.r, message_creation_job(message))
        except (StoreFailure, asyncio.CancelledError):
            logger.warning(
                "Message number %d of chat %d (application %s) consumed but not queued",
                number, chat_number, token,
            )
            raise

        return message

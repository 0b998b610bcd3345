# FastAPI ingress for chat and message creation.
# This layer is intentionally thin: bind + validate input, call ChatService, map errors.

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from chat_service import ChatService
from errors import ChatServiceError, InvalidInput, StoreFailure
from models import ChatResponse, ErrorResponse, MessageCreateRequest, MessageResponse
from settings import Settings

logger = logging.getLogger(__name__)

MAX_CHAT_NUMBER = 2**63 - 1


def connect_redis(settings: Settings) -> Redis:
    return Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=settings.redis_connect_timeout,
        socket_timeout=settings.request_timeout,
    )


def parse_chat_number(raw: str) -> int:
    if not raw:
        raise InvalidInput("Chat number is required")
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidInput("Invalid chat number format")
    number = int(raw)
    if number > MAX_CHAT_NUMBER:
        raise InvalidInput("Invalid chat number format")
    return number


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


def get_service(request: Request) -> ChatService:
    # No request proceeds on a handle that never passed the startup PING
    r = getattr(request.app.state, "redis", None)
    if r is None:
        raise StoreFailure("using an unestablished Redis connection")
    return ChatService(r, request.app.state.settings.request_timeout)


def create_app(settings: Settings | None = None, redis_factory=connect_redis) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        r = redis_factory(settings)
        try:
            await asyncio.wait_for(r.ping(), timeout=settings.redis_connect_timeout)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            logger.critical("Failed to connect to Redis: %s", e)
            await r.aclose()
            raise
        logger.info("Successfully connected to Redis")

        app.state.redis = r
        try:
            yield
        finally:
            app.state.redis = None
            await r.aclose()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.redis = None

    @app.exception_handler(StoreFailure)
    async def store_failure_handler(request: Request, exc: StoreFailure):
        logger.error("Redis error while %s (%s %s)", exc.operation, request.method, request.url.path,
                     exc_info=exc.__cause__)
        return error_response("Internal server error", 500)

    @app.exception_handler(ChatServiceError)
    async def service_error_handler(request: Request, exc: ChatServiceError):
        return error_response(str(exc), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response("Invalid request body: body is required", 400)

    @app.get("/health")
    async def health():
        # Independent of Redis availability
        return {"status": "ok"}

    # "{token}" never matches an empty segment, so "/applications//..." needs its own routes
    @app.post("/api/v1/applications//chats", status_code=201, response_model=ChatResponse)
    async def create_chat_without_token():
        raise InvalidInput("Application token is required")

    @app.post(
        "/api/v1/applications//chats/{chat_number}/messages",
        status_code=201,
        response_model=MessageResponse,
    )
    async def create_message_without_token(chat_number: str):
        raise InvalidInput("Application token is required")

    @app.post("/api/v1/applications/{token}/chats", status_code=201, response_model=ChatResponse)
    async def create_chat(token: str, service: ChatService = Depends(get_service)):
        chat = await service.create_chat(token)
        return ChatResponse(chat=chat)

    @app.post(
        "/api/v1/applications/{token}/chats/{chat_number}/messages",
        status_code=201,
        response_model=MessageResponse,
    )
    async def create_message(
        token: str,
        chat_number: str,
        payload: MessageCreateRequest,
        service: ChatService = Depends(get_service),
    ):
        message = await service.create_message(
            token, parse_chat_number(chat_number), payload.message.body
        )
        return MessageResponse(message=message)

    return app


app = create_app()


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting server on port %s", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

# Records handed back to clients and passed to the worker as job arguments.
# Field names are part of the wire contract with the Sidekiq consumer; do not rename.

from pydantic import BaseModel, Field


class Chat(BaseModel):
    number: int
    application_token: str
    timestamp: str


class Message(BaseModel):
    number: int
    body: str
    chat_number: int
    application_token: str
    timestamp: str


class ChatResponse(BaseModel):
    chat: Chat


class MessageResponse(BaseModel):
    message: Message


class MessageBody(BaseModel):
    body: str = Field(min_length=1)


class MessageCreateRequest(BaseModel):
    message: MessageBody


class ErrorResponse(BaseModel):
    error: str

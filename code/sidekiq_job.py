# Sidekiq-compatible job descriptors for chat and message creation.
# The JSON produced here is read by the Rails worker; key names must stay byte-for-byte.

import secrets
import time
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from errors import StoreFailure
from models import Chat, Message

JID_BYTES = 12


class JobRoute(NamedTuple):
    job_class: str
    queue: str


CHAT_CREATION = JobRoute("ChatsCreatorJob", "chats_creation_queue")
MESSAGE_CREATION = JobRoute("MessageCreatorJob", "messages_creation_queue")


def generate_jid() -> str:
    # 24 lowercase hex chars from the OS CSPRNG
    return secrets.token_hex(JID_BYTES)


def rfc3339_nano(ns: int) -> str:
    """Render epoch nanoseconds as RFC 3339 in UTC.

    Matches Go's RFC3339Nano layout: trailing zeros of the fraction are
    trimmed and the fraction is dropped entirely when it is zero.
    """
    secs, frac = divmod(ns, 1_000_000_000)
    out = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(secs))
    if frac:
        out += "." + f"{frac:09d}".rstrip("0")
    return out + "Z"


def now_rfc3339_nano() -> str:
    return rfc3339_nano(time.time_ns())


class SidekiqJob(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    job_class: str = Field(alias="class")
    args: list[Chat | Message]
    retry: bool = True
    queue: str
    jid: str = Field(default_factory=generate_jid)
    created_at: str
    enqueued_at: str

    def to_json(self) -> str:
        try:
            return self.model_dump_json(by_alias=True)
        except ValueError as e:
            raise StoreFailure(f"serializing {self.job_class} job {self.jid}") from e


def build_job(record: Chat | Message, route: JobRoute) -> SidekiqJob:
    # created_at and enqueued_at are always equal here; Sidekiq expects both
    now = now_rfc3339_nano()
    return SidekiqJob(
        job_class=route.job_class,
        args=[record],
        retry=True,
        queue=route.queue,
        created_at=now,
        enqueued_at=now,
    )


def chat_creation_job(chat: Chat) -> SidekiqJob:
    return build_job(chat, CHAT_CREATION)


def message_creation_job(message: Message) -> SidekiqJob:
    return build_job(message, MESSAGE_CREATION)

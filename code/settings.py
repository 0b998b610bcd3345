# Environment-driven configuration, read once at startup.

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    redis_url: str = "redis://localhost:6379/0"
    request_timeout: float = 10.0
    redis_connect_timeout: float = 5.0
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env=None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            redis_url=env.get("REDIS_URL", cls.redis_url),
            request_timeout=float(env.get("REQUEST_TIMEOUT_SECONDS", cls.request_timeout)),
            redis_connect_timeout=float(
                env.get("REDIS_CONNECT_TIMEOUT_SECONDS", cls.redis_connect_timeout)
            ),
            host=env.get("HOST", cls.host),
            port=int(env.get("PORT", cls.port)),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )

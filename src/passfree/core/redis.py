import logging

import redis
import redis.asyncio as aioredis

from passfree.core.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    client: aioredis.Redis | None = None

    async def connect(self) -> None:
        if not settings.REDIS_URL:
            raise RuntimeError("REDIS_URL must be set when SINGLE_USE_LINKS is enabled")

        self.client = aioredis.from_url(
            str(settings.REDIS_URL),
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            decode_responses=True,
            socket_connect_timeout=10,
            socket_timeout=10,
            retry_on_timeout=True,
            retry_on_error=[
                redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError,
            ],
            health_check_interval=30,
        )
        logger.info("[PassFree] Redis client connected")

    async def disconnect(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None


redis_client = RedisClient()


async def check_redis() -> None:
    if not redis_client.client:
        raise RuntimeError("Redis client is not initialized")
    await redis_client.client.ping()

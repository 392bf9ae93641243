# services/redemption_store.py
"""
Optional single-use enforcement for login links.

The token protocol itself is stateless: a link stays valid until it expires.
Deployments that want each link to work only once plug a RedemptionStore into
PasswordlessLoginService. The record is keyed by a fingerprint of the
correlation token, which is unique per login attempt.
"""

import logging
from datetime import timedelta
from typing import Protocol

import redis.asyncio as aioredis

from passfree.auth_strategies.constants import REDEEMED_LINK_PREFIX
from passfree.core.security import SecurityUtils

logger = logging.getLogger(__name__)


class RedemptionStore(Protocol):
    async def redeem(self, correlation_token: str, ttl: timedelta) -> bool:
        """Record the attempt as used. Returns False if it was already used."""
        ...


class RedisRedemptionStore:
    def __init__(self, redis_client: aioredis.Redis) -> None:
        self.redis = redis_client

    @staticmethod
    def key_for(correlation_token: str) -> str:
        return f"{REDEEMED_LINK_PREFIX}{SecurityUtils.fingerprint(correlation_token, length=64)}"

    async def redeem(self, correlation_token: str, ttl: timedelta) -> bool:
        key = self.key_for(correlation_token)
        # SET NX is atomic; only the first redemption wins
        created = await self.redis.set(key, "redeemed", ex=int(ttl.total_seconds()) or 1, nx=True)
        if not created:
            logger.warning(f"[PassFree] Login link replayed. key={key[-12:]}")
            return False
        return True

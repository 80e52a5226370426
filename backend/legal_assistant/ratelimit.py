"""Chat rate limiting.

A ``RateLimitPolicy`` maps request paths to buckets and asks a ``RateLimiter``
whether the caller still has quota in the bucket. Counters live in Redis when
one is configured. A Redis outage never blocks chat: the limiter logs the
failure and lets the request through.
"""

import logging
from datetime import datetime, timezone

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from backend.legal_assistant.db.context import RequestContext
from backend.legal_assistant.db.repositories import RateLimiter, RetryAfter

logger = logging.getLogger(__name__)

DEFAULT_BUCKETS = {"/chat/message": "chat"}


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Per-user key for one bucket, e.g. ``"user-1:chat"``."""
    return f"{ctx.user_id}:{bucket}"


class RedisRateLimiter:
    """Fixed-window counter shared by every API process.

    Each window gets its own key, so the counter never needs resetting: the
    key expires at the end of its window.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        max_requests: int,
        window_seconds: int = 60,
        prefix: str = "legal:quota",
    ) -> None:
        self._redis = client
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._prefix = prefix

    async def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Count one request against ``key``.

        Returns:
            RetryAfter if over quota, None if allowed or if Redis is unavailable
        """
        timestamp = int(now.timestamp())
        window_start = timestamp - timestamp % self._window_seconds
        window_end = window_start + self._window_seconds
        redis_key = f"{self._prefix}:{key}:{window_start}"

        try:
            count = await self._redis.incr(redis_key)
            if count == 1:
                await self._redis.expireat(redis_key, window_end)
        except RedisError as e:
            logger.warning(f"[ratelimit] redis unavailable, allowing request key={key}: {e}")
            return None

        if count > self._max_requests:
            return RetryAfter(seconds=max(1, window_end - timestamp))
        return None


class RateLimitPolicy:
    """Decides which requests count against which bucket."""

    def __init__(self, limiter: RateLimiter, buckets: dict[str, str] | None = None) -> None:
        self._limiter = limiter
        self._buckets = dict(DEFAULT_BUCKETS if buckets is None else buckets)

    def bucket_for(self, path: str) -> str | None:
        for suffix, bucket in self._buckets.items():
            if path.endswith(suffix):
                return bucket
        return None

    async def check(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> RetryAfter | None:
        """Count the request if its path is limited; None means allowed."""
        bucket = self.bucket_for(path)
        if bucket is None:
            return None

        if now is None:
            now = datetime.now(timezone.utc)
        return await self._limiter.check_quota(make_rate_limit_key(ctx, bucket), now)

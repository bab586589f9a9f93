"""
Rate Limiting Dependencies

Distributed fixed-window rate limiting on Redis, so limits hold across
every API instance:

1. Request comes in → extract client IP
2. Redis key: "ratelimit:{endpoint_key}:{ip}"
3. INCR the counter (atomic), set TTL on the first hit of the window
4. Counter > limit → 429

When Redis is unavailable (no client at startup, or a command fails) the
limiter fails open and requests go through.
"""
from typing import Optional

from fastapi import Request, HTTPException, status
from redis.asyncio import Redis

from portlink.config.rate_limits import get_rate_limit, get_period_seconds
from portlink.utils.logger import logger


class RedisRateLimiter:
    """
    Fixed-window counter per (endpoint, IP).

    - INCR is atomic: no race between API workers
    - TTL auto-expires keys: the window resets without cleanup
    - Fail-open on error: Redis trouble never takes the API down
    """

    def __init__(self, redis_client: Optional[Redis]):
        self.redis = redis_client

    async def is_rate_limited(
        self,
        key: str,
        ip_address: str,
        limit: int,
        period_seconds: int
    ) -> tuple[bool, dict]:
        """
        Count this request and report whether it is over the limit.

        Returns:
            tuple[bool, dict]:
                - bool: True if the request should be REJECTED
                - dict: limit / current / remaining / reset_in_seconds
        """
        if self.redis is None:
            return False, {"error": "rate_limiter_unavailable"}

        redis_key = f"ratelimit:{key}:{ip_address}"

        try:
            current_count = await self.redis.incr(redis_key)

            # First hit of the window starts the clock
            if current_count == 1:
                await self.redis.expire(redis_key, period_seconds)

            ttl = await self.redis.ttl(redis_key)

            info = {
                "limit": limit,
                "current": current_count,
                "remaining": max(0, limit - current_count),
                "reset_in_seconds": ttl if ttl > 0 else 0
            }

            logger.debug(
                f"RateLimit check - Endpoint: {key}, IP: {ip_address}, "
                f"Requests: {current_count}/{limit}, Remaining: {info['remaining']}"
            )

            return current_count > limit, info

        except Exception as e:
            logger.error(f"Rate limiter error for {key} from {ip_address}: {e}")
            logger.warning("Rate limiting disabled - Redis unavailable")
            return False, {"error": "rate_limiter_unavailable"}


async def check_rate_limit(
    request: Request,
    endpoint_key: str,
    limit: int,
    period_seconds: int
) -> dict:
    """
    Check the limit for one request.

    Raises:
        HTTPException: 429 Too Many Requests if limited

    Usage:
        async def rate_limit_feed(request: Request):
            return await check_rate_limit(request, "feed:list", 120, 60)

        @router.get("/feed")
        async def get_feed(_rate_limit: dict = Depends(rate_limit_feed)):
            ...
    """
    client_ip = request.client.host if request.client else "unknown"

    # Stored on app.state during startup (see main.py lifespan)
    redis_client = getattr(request.app.state, "redis_client", None)
    limiter = RedisRateLimiter(redis_client)

    is_limited, info = await limiter.is_rate_limited(
        key=endpoint_key,
        ip_address=client_ip,
        limit=limit,
        period_seconds=period_seconds
    )

    if is_limited:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "rate_limit_exceeded",
                "message": f"Exceeded {limit} requests per {period_seconds}s",
                "limit": info["limit"],
                "current": info.get("current", 0),
                "remaining": info["remaining"],
                "reset_in_seconds": info["reset_in_seconds"]
            },
            headers={"Retry-After": str(info["reset_in_seconds"])},
        )

    return info


def rate_limit(endpoint_key: str):
    """
    Build a FastAPI dependency for a configured endpoint key.

    Usage:
        @router.get("/feed", dependencies=[Depends(rate_limit("feed:list"))])
    """
    config = get_rate_limit(endpoint_key)
    period_seconds = get_period_seconds(config.period)

    async def dependency(request: Request) -> dict:
        return await check_rate_limit(
            request=request,
            endpoint_key=endpoint_key,
            limit=config.requests,
            period_seconds=period_seconds
        )

    return dependency

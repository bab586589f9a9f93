"""
Rate Limiting Configuration Module

Purpose: Centralized rate limit definitions for all API endpoints.
Limits follow endpoint cost:
- Feed reads: high (mostly served from the feed cache)
- Single-post reads: high (one row + an atomic view increment)
- Writes: lower (DB writes that also invalidate the feed cache)
- Engagement toggles: medium (cheap writes, but easy to spam)
- Reports: low (each one lands in the moderation queue)
- Admin moderation: low
"""

from dataclasses import dataclass
from typing import Dict

from portlink.utils.logger import logger


@dataclass
class RateLimitConfig:
    """
    Dataclass for rate limit rules.

    Attributes:
        requests (int): Number of requests allowed
        period (str): Time period ('minute', 'hour', 'day')
        description (str): Human-readable description

    Example:
        RateLimitConfig(requests=120, period="minute", description="Main feed")
        → Results in: "120/minute" limit
    """
    requests: int
    period: str
    description: str


RATE_LIMITS: Dict[str, RateLimitConfig] = {
    # ═══════════════════════════════════════════════════════════════════════════
    # 📰 FEED ENDPOINTS (read-heavy, cached)
    # ═══════════════════════════════════════════════════════════════════════════

    "feed:list": RateLimitConfig(
        requests=120,
        period="minute",
        description="Paginated feed - cache hit for filter-only queries, DB otherwise"
    ),

    "feed:editor_picks": RateLimitConfig(
        requests=120,
        period="minute",
        description="Editor picks - cached for 10 minutes"
    ),

    "feed:trending_tags": RateLimitConfig(
        requests=60,
        period="minute",
        description="Trending tech tags - GROUP BY over published tags, cached 30 minutes"
    ),

    # ═══════════════════════════════════════════════════════════════════════════
    # 📝 POSTS ENDPOINTS
    # ═══════════════════════════════════════════════════════════════════════════

    "posts:read": RateLimitConfig(
        requests=100,
        period="minute",
        description="Single post or author listing - increments view count"
    ),

    "posts:write": RateLimitConfig(
        requests=30,
        period="minute",
        description="Create/update/publish/delete - DB write + feed cache invalidation"
    ),

    # ═══════════════════════════════════════════════════════════════════════════
    # ❤️  ENGAGEMENT ENDPOINTS
    # ═══════════════════════════════════════════════════════════════════════════

    "engagement:toggle": RateLimitConfig(
        requests=60,
        period="minute",
        description="Like/bookmark toggles - unique row insert/delete + notification"
    ),

    "comments:write": RateLimitConfig(
        requests=20,
        period="minute",
        description="Create/update/delete comments"
    ),

    "reports:create": RateLimitConfig(
        requests=10,
        period="hour",
        description="Post reports - one open report per post and user"
    ),

    "mentions:search": RateLimitConfig(
        requests=60,
        period="minute",
        description="Username autocomplete - prefix match on users"
    ),

    # ═══════════════════════════════════════════════════════════════════════════
    # 🛡️  ADMIN ENDPOINTS
    # ═══════════════════════════════════════════════════════════════════════════

    "admin:moderate": RateLimitConfig(
        requests=30,
        period="minute",
        description="Editor pick / hide / report handling - may invalidate the whole feed cache"
    ),

    # ═══════════════════════════════════════════════════════════════════════════
    # 🔐 DEFAULT FALLBACK (Unspecified endpoints)
    # ═══════════════════════════════════════════════════════════════════════════

    "default:read": RateLimitConfig(
        requests=100,
        period="minute",
        description="Default read limit for unspecified GET endpoints"
    ),

    "default:write": RateLimitConfig(
        requests=30,
        period="minute",
        description="Default write limit for unspecified POST/PATCH/DELETE endpoints"
    ),
}


def get_rate_limit(key: str) -> RateLimitConfig:
    """
    Look up the limit for an endpoint key.

    Unknown keys fall back to default:read.

    Examples:
        >>> get_rate_limit("feed:list").requests
        120
        >>> get_rate_limit("unknown:endpoint").requests  # Fallback
        100
    """
    if key not in RATE_LIMITS:
        logger.warning(f"⚠️  Unknown rate limit key '{key}', using default:read")
        return RATE_LIMITS["default:read"]
    return RATE_LIMITS[key]


def get_period_seconds(period: str) -> int:
    """
    Convert period string to seconds (used as the Redis TTL of the counter).

    Examples:
        >>> get_period_seconds("minute")
        60
        >>> get_period_seconds("day")
        86400
    """
    period_map = {
        "minute": 60,
        "hour": 3600,
        "day": 86400,
    }
    return period_map.get(period, 60)  # Default to minute if unknown

"""
Trending score for portfolio posts.

A post's trending score combines weighted engagement, views and a soft
logarithmic recency decay:

    engagement    = likes * 3 + bookmarks * 4 + comments * 3
    view_score    = view_count * 0.2
    recency_decay = 1 / log10(age_hours + 10)
    score         = (engagement + view_score) * recency_decay

Bookmarks carry the most weight (strongest intent signal). The decay never
reaches zero, so old posts with strong engagement are not starved, while
anything younger than ~10 hours gets a multiplicative boost.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class EngagementCounts:
    """Per-post relation counts (derived at query time, never stored)"""
    likes: int = 0
    comments: int = 0
    bookmarks: int = 0


@dataclass
class TrendingScore:
    """Score breakdown for a single post"""
    engagement: float
    view_score: float
    age_hours: float
    recency_decay: float
    score: float


class TrendingScorer:
    """Scores and ranks a candidate pool of posts for the trending feed."""

    LIKE_WEIGHT = 3
    BOOKMARK_WEIGHT = 4
    COMMENT_WEIGHT = 3
    VIEW_WEIGHT = 0.2

    # Candidate pool: min(limit * POOL_MULTIPLIER, MAX_POOL)
    POOL_MULTIPLIER = 5
    MAX_POOL = 200

    @classmethod
    def candidate_pool_size(cls, limit: int) -> int:
        return min(limit * cls.POOL_MULTIPLIER, cls.MAX_POOL)

    def score(
        self,
        counts: EngagementCounts,
        view_count: int,
        published_at: Optional[datetime],
        now: datetime,
    ) -> TrendingScore:
        engagement = (
            counts.likes * self.LIKE_WEIGHT
            + counts.bookmarks * self.BOOKMARK_WEIGHT
            + counts.comments * self.COMMENT_WEIGHT
        )
        view_score = (view_count or 0) * self.VIEW_WEIGHT

        age_hours = 0.0
        if published_at is not None:
            # SQLite hands back naive datetimes; stored values are UTC
            if published_at.tzinfo is None:
                published_at = published_at.replace(tzinfo=timezone.utc)
            # Future timestamps (clock skew) count as brand new
            age_hours = max((now - published_at).total_seconds() / 3600, 0.0)

        recency_decay = 1 / math.log10(age_hours + 10)

        return TrendingScore(
            engagement=engagement,
            view_score=view_score,
            age_hours=age_hours,
            recency_decay=recency_decay,
            score=(engagement + view_score) * recency_decay,
        )

    def rank(
        self,
        candidates: Sequence[Tuple[T, EngagementCounts]],
        now: Optional[datetime] = None,
    ) -> List[Tuple[T, EngagementCounts]]:
        """
        Order (post, counts) pairs by trending score, highest first.

        The sort is stable, so equal scores keep the candidate order
        (published_at descending).
        """
        now = now or datetime.now(timezone.utc)
        scored = [
            (pair, self.score(pair[1], pair[0].view_count, pair[0].published_at, now).score)
            for pair in candidates
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        return [pair for pair, _ in scored]

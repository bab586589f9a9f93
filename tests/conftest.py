"""
Shared fixtures: in-memory SQLite database, an in-memory cache double and
a small seeding helper for users, posts and engagement rows.
"""
import copy
import fnmatch
import json
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from portlink.database.config import Base
from portlink.models import User, Profile, Post, Like, Bookmark, Comment
from portlink.models.enums import PostStatus, TagKind


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryCache:
    """
    Dict-backed stand-in for RedisCache with the same async surface.

    Values round-trip through JSON like they would through Redis, and
    delete_pattern uses the same glob semantics as SCAN MATCH.
    """

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.set_calls = []
        self.deleted_patterns = []

    @property
    def is_connected(self) -> bool:
        return True

    @property
    def client(self):
        return None

    async def get(self, key):
        value = self.store.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key, value, ttl=300):
        self.set_calls.append(key)
        self.store[key] = json.loads(json.dumps(value, default=str))
        self.ttls[key] = ttl
        return True

    async def get_stats(self):
        return {"status": "connected", "keys": len(self.store)}

    async def delete_pattern(self, pattern):
        self.deleted_patterns.append(pattern)
        keys = [key for key in self.store if fnmatch.fnmatchcase(key, pattern)]
        for key in keys:
            del self.store[key]
            self.ttls.pop(key, None)
        return len(keys)


@pytest.fixture
async def engine():
    """Create test database and tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache():
    return InMemoryCache()


class Seeder:
    """
    Inserts rows directly, bypassing services (so no cache invalidation).

    Each insert runs in its own short session, so the session under test
    loads everything from the database instead of the identity map.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._users = 0

    async def _save(self, *rows):
        async with self.session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0]

    async def user(
        self,
        username: Optional[str] = None,
        profession: Optional[str] = None,
        is_open_to_work: bool = False,
        role: str = "user",
        name: Optional[str] = None,
    ) -> User:
        self._users += 1
        username = username or f"user{self._users}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            role=role,
            profile=Profile(
                name=name or username.title(),
                profession=profession,
                is_open_to_work=is_open_to_work,
            ),
        )
        return await self._save(user)

    async def post(
        self,
        author: User,
        title: str = "Portfolio",
        tech_stack: Sequence[str] = (),
        skills: Sequence[str] = (),
        status: PostStatus = PostStatus.PUBLISHED,
        published_at: Optional[datetime] = None,
        hours_ago: float = 1,
        view_count: int = 0,
        category: Optional[str] = None,
        is_team_project: bool = False,
        is_editor_pick: bool = False,
        summary: Optional[str] = None,
        content: str = "Project write-up",
    ) -> Post:
        if published_at is None and status == PostStatus.PUBLISHED:
            published_at = datetime.now(timezone.utc) - timedelta(hours=hours_ago)
        post = Post(
            author_id=author.id,
            title=title,
            summary=summary,
            content=content,
            category=category,
            is_team_project=is_team_project,
            status=status.value,
            view_count=view_count,
            published_at=published_at,
            is_editor_pick=is_editor_pick,
            tags=[],
        )
        post.set_tags(TagKind.TECH, list(tech_stack))
        post.set_tags(TagKind.SKILL, list(skills))
        return await self._save(post)

    async def like(self, post: Post, user: User) -> None:
        await self._save(Like(post_id=post.id, user_id=user.id))

    async def bookmark(self, post: Post, user: User) -> None:
        await self._save(Bookmark(post_id=post.id, user_id=user.id))

    async def comment(self, post: Post, user: User, content: str = "Nice work") -> None:
        await self._save(Comment(post_id=post.id, author_id=user.id, content=content))


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)

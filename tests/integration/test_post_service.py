"""
Integration tests for post writes and single-post reads.

Every mutation must invalidate the feed cache; reads count views.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError

from portlink.api.schemas.posts import PostCreate, PostUpdate
from portlink.models.enums import PostStatus
from portlink.models.post import Post
from portlink.repositories.post_repository import PostRepository
from portlink.services.exceptions import NotFoundError, ForbiddenError
from portlink.services.feed_service import FeedService
from portlink.services.post_service import PostService


@pytest.fixture
def posts(db, cache):
    return PostService(db, FeedService(PostRepository(db), cache=cache))


@pytest.fixture
async def author(seed):
    return await seed.user("ada")


@pytest.fixture
async def stranger(seed):
    return await seed.user("eve")


def draft(**overrides) -> PostCreate:
    data = {"title": "My portfolio", "content": "# Hello", "tech_stack": ["React", " Node ", "React"]}
    data.update(overrides)
    return PostCreate(**data)


class TestCreate:
    @pytest.mark.asyncio
    async def test_defaults_to_draft_without_published_at(self, posts, author, cache):
        created = await posts.create(author.id, draft())

        assert created.status == PostStatus.DRAFT
        assert created.published_at is None
        assert created.view_count == 0
        assert created.tech_stack == ["React", "Node"]
        assert created.author.username == "ada"
        assert cache.deleted_patterns == ["feed:*"]

    @pytest.mark.asyncio
    async def test_created_published_gets_published_at(self, posts, author):
        created = await posts.create(author.id, draft(status=PostStatus.PUBLISHED))

        assert created.status == PostStatus.PUBLISHED
        assert created.published_at is not None


class TestFindOne:
    @pytest.mark.asyncio
    async def test_each_read_counts_one_view(self, posts, seed, author, stranger):
        post = await seed.post(author, view_count=5)

        first = await posts.find_one(post.id, stranger.id)
        second = await posts.find_one(post.id, stranger.id)
        anonymous = await posts.find_one(post.id)

        assert first.view_count == 6
        assert second.view_count == 7
        assert anonymous.view_count == 8

    @pytest.mark.asyncio
    async def test_missing_post(self, posts):
        with pytest.raises(NotFoundError):
            await posts.find_one(12345)

    @pytest.mark.asyncio
    async def test_draft_hidden_from_others_but_visible_to_author(self, posts, seed, author, stranger):
        post = await seed.post(author, status=PostStatus.DRAFT)

        with pytest.raises(NotFoundError):
            await posts.find_one(post.id, stranger.id)

        own = await posts.find_one(post.id, author.id)
        assert own.status == PostStatus.DRAFT

    @pytest.mark.asyncio
    async def test_includes_engagement_counts(self, posts, seed, author, stranger):
        post = await seed.post(author)
        await seed.like(post, stranger)
        await seed.comment(post, stranger)
        await seed.comment(post, author)

        result = await posts.find_one(post.id)

        assert (result.counts.likes, result.counts.comments, result.counts.bookmarks) == (1, 2, 0)


class TestListByAuthor:
    @pytest.mark.asyncio
    async def test_author_sees_every_status(self, posts, seed, author, stranger):
        await seed.post(author, "Live")
        await seed.post(author, "Draft", status=PostStatus.DRAFT)

        own = await posts.list_by_author(author.id, author.id)
        public = await posts.list_by_author(author.id, stranger.id)

        assert len(own) == 2
        assert [p.title for p in public] == ["Live"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, posts, author, cache):
        created = await posts.create(author.id, draft(summary="short"))

        updated = await posts.update(created.id, author.id, PostUpdate(title="New title"))

        assert updated.title == "New title"
        assert updated.summary == "short"
        assert updated.tech_stack == ["React", "Node"]
        assert cache.deleted_patterns == ["feed:*", "feed:*"]

    @pytest.mark.asyncio
    async def test_replaces_tags_in_request_order(self, posts, author):
        created = await posts.create(author.id, draft())

        updated = await posts.update(created.id, author.id, PostUpdate(tech_stack=["Node", "Go"], skills=["API design"]))

        assert updated.tech_stack == ["Node", "Go"]
        assert updated.skills == ["API design"]

    @pytest.mark.asyncio
    async def test_only_author_may_update(self, posts, author, stranger):
        created = await posts.create(author.id, draft())

        with pytest.raises(ForbiddenError):
            await posts.update(created.id, stranger.id, PostUpdate(title="Mine now"))

    @pytest.mark.asyncio
    async def test_missing_post(self, posts, author):
        with pytest.raises(NotFoundError):
            await posts.update(999, author.id, PostUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_published_at_survives_unpublish_and_republish(self, posts, author):
        created = await posts.create(author.id, draft())
        published = await posts.publish(created.id, author.id)
        first_published_at = published.published_at

        hidden = await posts.update(created.id, author.id, PostUpdate(status=PostStatus.DRAFT))
        again = await posts.publish(created.id, author.id)

        assert first_published_at is not None
        assert hidden.published_at == first_published_at
        assert again.published_at == first_published_at


class TestPublishAndDelete:
    @pytest.mark.asyncio
    async def test_publish_sets_status_and_invalidates(self, posts, author, cache):
        created = await posts.create(author.id, draft())
        cache.deleted_patterns.clear()

        published = await posts.publish(created.id, author.id)

        assert published.status == PostStatus.PUBLISHED
        assert published.published_at is not None
        assert cache.deleted_patterns == ["feed:*"]

    @pytest.mark.asyncio
    async def test_delete_removes_post_and_invalidates(self, posts, author, cache):
        created = await posts.create(author.id, draft())
        cache.deleted_patterns.clear()

        await posts.delete(created.id, author.id)

        assert cache.deleted_patterns == ["feed:*"]
        with pytest.raises(NotFoundError):
            await posts.find_one(created.id, author.id)

    @pytest.mark.asyncio
    async def test_delete_with_engagement_leaves_rows_to_the_database(self, db, posts, seed, author, stranger):
        post = await seed.post(author, "Popular")
        await seed.like(post, stranger)
        await seed.comment(post, stranger)

        loaded = (await db.execute(select(Post).where(Post.id == post.id))).scalar_one()
        with pytest.raises(InvalidRequestError):
            loaded.likes

        await posts.delete(post.id, author.id)

        with pytest.raises(NotFoundError):
            await posts.find_one(post.id, author.id)

    @pytest.mark.asyncio
    async def test_only_author_may_delete(self, posts, author, stranger, cache):
        created = await posts.create(author.id, draft())
        cache.deleted_patterns.clear()

        with pytest.raises(ForbiddenError):
            await posts.delete(created.id, stranger.id)
        assert cache.deleted_patterns == []

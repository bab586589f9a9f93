"""
Integration tests for moderation, curation and user profiles.
"""
import pytest

from portlink.api.schemas.feed import FeedQuery
from portlink.models.enums import PostStatus, NotificationType
from portlink.repositories.post_repository import PostRepository
from portlink.services.admin_service import AdminService
from portlink.services.exceptions import NotFoundError, ConflictError
from portlink.services.feed_service import FeedService
from portlink.services.notification_service import NotificationService
from portlink.services.user_service import UserService


@pytest.fixture
def feed(db, cache):
    return FeedService(PostRepository(db), cache=cache)


@pytest.fixture
def admin(db, feed):
    return AdminService(db, feed, NotificationService(db))


class TestAdminService:
    @pytest.mark.asyncio
    async def test_hide_removes_from_feed_and_notifies_author(self, db, admin, feed, seed, cache):
        author = await seed.user("ada")
        post = await seed.post(author, "Questionable")
        before = await feed.get_feed(FeedQuery())
        assert [p.id for p in before.posts] == [post.id]

        hidden = await admin.hide_post(post.id)

        assert hidden.status == PostStatus.HIDDEN.value
        assert cache.deleted_patterns == ["feed:*"]
        assert (await feed.get_feed(FeedQuery())).posts == []

        inbox = await NotificationService(db).list_for_user(author.id)
        assert [n.type for n in inbox] == [NotificationType.POST_HIDDEN.value]
        assert inbox[0].related_post_id == post.id

    @pytest.mark.asyncio
    async def test_editor_pick_shows_up_after_invalidation(self, admin, feed, seed, cache):
        author = await seed.user("ada")
        post = await seed.post(author, "Curated")
        assert await feed.get_editor_picks() == []

        await admin.set_editor_pick(post.id, True)
        picks = await feed.get_editor_picks()

        assert [p.id for p in picks] == [post.id]
        assert picks[0].is_editor_pick is True
        assert cache.deleted_patterns == ["feed:*"]

    @pytest.mark.asyncio
    async def test_missing_post(self, admin):
        with pytest.raises(NotFoundError):
            await admin.hide_post(31337)


class TestUserService:
    @pytest.mark.asyncio
    async def test_register_and_get(self, db):
        users = UserService(db)

        user = await users.register("grace", "grace@example.com", name="Grace", profession="DEVELOPER")

        assert user.id is not None
        assert user.created_at is not None
        assert user.profile.profession == "DEVELOPER"
        assert (await users.get(user.id)).username == "grace"

    @pytest.mark.asyncio
    async def test_duplicate_username_or_email(self, db, seed):
        await seed.user("grace")
        users = UserService(db)

        with pytest.raises(ConflictError):
            await users.register("grace", "other@example.com")
        with pytest.raises(ConflictError):
            await users.register("other", "grace@example.com")

    @pytest.mark.asyncio
    async def test_update_profile_applies_only_given_fields(self, db, seed):
        user = await seed.user("grace", profession="DESIGNER", name="Grace")
        users = UserService(db)

        updated = await users.update_profile(user.id, {"is_open_to_work": True})

        assert updated.profile.is_open_to_work is True
        assert updated.profile.profession == "DESIGNER"
        assert updated.profile.name == "Grace"

    @pytest.mark.asyncio
    async def test_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            await UserService(db).get(404)

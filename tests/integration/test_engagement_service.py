"""
Integration tests for likes, bookmarks, comments and the notifications
they produce.
"""
import pytest

from portlink.models.enums import PostStatus, NotificationType
from portlink.services.engagement_service import EngagementService
from portlink.services.exceptions import NotFoundError, ForbiddenError
from portlink.services.notification_service import NotificationService


@pytest.fixture
def notifications(db):
    return NotificationService(db)


@pytest.fixture
def engagement(db, notifications):
    return EngagementService(db, notifications)


@pytest.fixture
async def author(seed):
    return await seed.user("ada")


@pytest.fixture
async def fan(seed):
    return await seed.user("fan", name="Fan Person")


@pytest.fixture
async def post(seed, author):
    return await seed.post(author, "Engaging post")


class TestLikes:
    @pytest.mark.asyncio
    async def test_toggle_like_on_and_off(self, engagement, post, fan):
        liked = await engagement.toggle_like(post.id, fan.id)
        status = await engagement.like_status(post.id, fan.id)
        unliked = await engagement.toggle_like(post.id, fan.id)

        assert liked == {"liked": True, "message": "Post liked"}
        assert status == {"liked": True}
        assert unliked["liked"] is False
        assert await engagement.like_status(post.id, fan.id) == {"liked": False}

    @pytest.mark.asyncio
    async def test_like_notifies_author(self, engagement, notifications, post, author, fan):
        await engagement.toggle_like(post.id, fan.id)

        inbox = await notifications.list_for_user(author.id)

        assert len(inbox) == 1
        assert inbox[0].type == NotificationType.LIKE.value
        assert inbox[0].related_post_id == post.id
        assert inbox[0].related_user_id == fan.id
        assert inbox[0].is_read is False

    @pytest.mark.asyncio
    async def test_liking_own_post_creates_no_notification(self, engagement, notifications, post, author):
        await engagement.toggle_like(post.id, author.id)

        assert await notifications.unread_count(author.id) == 0

    @pytest.mark.asyncio
    async def test_cannot_like_unpublished(self, engagement, seed, author, fan):
        draft = await seed.post(author, status=PostStatus.DRAFT)

        with pytest.raises(ForbiddenError):
            await engagement.toggle_like(draft.id, fan.id)

    @pytest.mark.asyncio
    async def test_cannot_like_missing(self, engagement, fan):
        with pytest.raises(NotFoundError):
            await engagement.toggle_like(404, fan.id)

    @pytest.mark.asyncio
    async def test_post_likes_lists_users(self, engagement, post, fan):
        await engagement.toggle_like(post.id, fan.id)

        likes = await engagement.post_likes(post.id)

        assert likes["count"] == 1
        assert likes["users"] == [{"id": fan.id, "username": "fan", "name": "Fan Person"}]


class TestBookmarks:
    @pytest.mark.asyncio
    async def test_toggle_and_list(self, engagement, post, fan):
        result = await engagement.toggle_bookmark(post.id, fan.id)

        bookmarks = await engagement.list_user_bookmarks(fan.id)

        assert result["bookmarked"] is True
        assert [b.post.id for b in bookmarks] == [post.id]
        assert await engagement.bookmark_status(post.id, fan.id) == {"bookmarked": True}

        await engagement.toggle_bookmark(post.id, fan.id)
        assert await engagement.list_user_bookmarks(fan.id) == []

    @pytest.mark.asyncio
    async def test_cannot_bookmark_hidden(self, engagement, seed, author, fan):
        hidden = await seed.post(author, status=PostStatus.HIDDEN)

        with pytest.raises(ForbiddenError):
            await engagement.toggle_bookmark(hidden.id, fan.id)


class TestComments:
    @pytest.mark.asyncio
    async def test_add_list_update_delete(self, engagement, notifications, post, author, fan):
        comment = await engagement.add_comment(post.id, fan.id, "Great work")

        assert comment.author.username == "fan"
        assert await notifications.unread_count(author.id) == 1

        updated = await engagement.update_comment(comment.id, fan.id, "Great work!")
        assert updated.content == "Great work!"

        listed = await engagement.list_comments(post.id)
        assert [c.id for c in listed] == [comment.id]

        await engagement.delete_comment(comment.id, fan.id)
        assert await engagement.list_comments(post.id) == []

    @pytest.mark.asyncio
    async def test_only_comment_author_may_edit(self, engagement, post, author, fan):
        comment = await engagement.add_comment(post.id, fan.id, "Mine")

        with pytest.raises(ForbiddenError):
            await engagement.update_comment(comment.id, author.id, "Edited by someone else")
        with pytest.raises(ForbiddenError):
            await engagement.delete_comment(comment.id, author.id)

    @pytest.mark.asyncio
    async def test_cannot_comment_on_draft(self, engagement, seed, author, fan):
        draft = await seed.post(author, status=PostStatus.DRAFT)

        with pytest.raises(ForbiddenError):
            await engagement.add_comment(draft.id, fan.id, "Hello?")

    @pytest.mark.asyncio
    async def test_missing_comment(self, engagement, fan):
        with pytest.raises(NotFoundError):
            await engagement.update_comment(77, fan.id, "x")


class TestNotifications:
    @pytest.mark.asyncio
    async def test_mark_read_and_counts(self, engagement, notifications, post, author, fan):
        await engagement.toggle_like(post.id, fan.id)
        await engagement.toggle_bookmark(post.id, fan.id)
        inbox = await notifications.list_for_user(author.id)

        await notifications.mark_as_read(inbox[0].id, author.id)

        assert await notifications.unread_count(author.id) == 1
        assert len(await notifications.list_for_user(author.id, only_unread=True)) == 1

        assert await notifications.mark_all_as_read(author.id) == 1
        assert await notifications.unread_count(author.id) == 0

    @pytest.mark.asyncio
    async def test_cannot_touch_someone_elses_notification(self, engagement, notifications, post, author, fan):
        await engagement.toggle_like(post.id, fan.id)
        inbox = await notifications.list_for_user(author.id)

        with pytest.raises(NotFoundError):
            await notifications.mark_as_read(inbox[0].id, fan.id)
        with pytest.raises(NotFoundError):
            await notifications.delete(inbox[0].id, fan.id)

        await notifications.delete(inbox[0].id, author.id)
        assert await notifications.list_for_user(author.id) == []

"""
ORM models. Importing this package registers every mapper on Base.metadata.
"""
from portlink.models.user import User, Profile
from portlink.models.post import Post, PostTag
from portlink.models.engagement import Like, Bookmark, Comment
from portlink.models.notification import Notification
from portlink.models.moderation import Report, Mention

__all__ = [
    "User",
    "Profile",
    "Post",
    "PostTag",
    "Like",
    "Bookmark",
    "Comment",
    "Notification",
    "Report",
    "Mention",
]

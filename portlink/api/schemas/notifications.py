from datetime import datetime
from typing import Optional

from portlink.api.schemas.base import CamelModel
from portlink.models.enums import NotificationType


class NotificationResponse(CamelModel):
    id: int
    type: NotificationType
    title: str
    message: str
    related_post_id: Optional[int] = None
    related_user_id: Optional[int] = None
    is_read: bool
    created_at: Optional[datetime] = None


class UnreadCountResponse(CamelModel):
    count: int


class MessageResponse(CamelModel):
    message: str

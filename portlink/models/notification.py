from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, false
from sqlalchemy.sql import func
from portlink.database.config import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(500), nullable=False)
    related_post_id = Column(Integer, ForeignKey("posts.id", ondelete="SET NULL"))
    related_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        # Inbox: WHERE user_id=? [AND is_read=false] ORDER BY created_at DESC
        Index('idx_notifications_user_read', 'user_id', 'is_read', 'created_at'),
    )

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portlink.database.config import Base
from portlink.models.enums import ReportStatus


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(20), nullable=False)
    reason = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, server_default=ReportStatus.PENDING.value)
    admin_note = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    reporter = relationship("User", lazy="selectin")
    post = relationship("Post", lazy="selectin")

    __table_args__ = (
        # Duplicate check: WHERE post_id=? AND reporter_id=? AND status IN (...)
        Index('idx_reports_post_reporter', 'post_id', 'reporter_id'),
        # Admin queue: WHERE status=? ORDER BY created_at DESC
        Index('idx_reports_status_created', 'status', 'created_at'),
    )


class Mention(Base):
    __tablename__ = "mentions"

    id = Column(Integer, primary_key=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mentioned_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"))
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    author = relationship("User", foreign_keys=[author_id], lazy="selectin")
    post = relationship("Post", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            '(post_id IS NOT NULL) OR (comment_id IS NOT NULL)',
            name='ck_mentions_has_source',
        ),
        Index('idx_mentions_user_created', 'mentioned_user_id', 'created_at'),
    )

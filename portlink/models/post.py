from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, UniqueConstraint, false,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portlink.database.config import Base
from portlink.models.enums import PostStatus, TagKind


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    summary = Column(String(500))
    content = Column(Text, nullable=False)  # markdown
    category = Column(String(30))
    is_team_project = Column(Boolean, nullable=False, default=False, server_default=false())
    status = Column(String(20), nullable=False, default=PostStatus.DRAFT.value, server_default=PostStatus.DRAFT.value)
    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    published_at = Column(DateTime(timezone=True))
    is_editor_pick = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User", back_populates="posts", lazy="selectin")
    tags = relationship(
        "PostTag",
        back_populates="post",
        lazy="selectin",
        order_by="PostTag.position",
        cascade="all, delete-orphan",
    )
    likes = relationship("Like", back_populates="post", lazy="raise", cascade="all, delete-orphan", passive_deletes=True)
    bookmarks = relationship("Bookmark", back_populates="post", lazy="raise", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="post", lazy="raise", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        # Feed: WHERE status='PUBLISHED' ORDER BY published_at DESC
        Index('idx_posts_status_published', 'status', 'published_at'),
        # Popular sort
        Index('idx_posts_status_views', 'status', 'view_count'),
        Index('idx_posts_editor_pick', 'is_editor_pick', 'published_at'),
    )

    def _tag_names(self, kind: TagKind) -> list[str]:
        return [tag.name for tag in self.tags if tag.kind == kind.value]

    @property
    def tech_stack(self) -> list[str]:
        return self._tag_names(TagKind.TECH)

    @property
    def skills(self) -> list[str]:
        return self._tag_names(TagKind.SKILL)

    def set_tags(self, kind: TagKind, names: list[str]) -> None:
        """
        Replace every tag of one kind, keeping request order and dropping duplicates.

        Existing rows are reused so re-sending an unchanged tag never trips
        the (post_id, kind, name) unique constraint mid-flush.
        """
        existing = {tag.name: tag for tag in self.tags if tag.kind == kind.value}
        others = [tag for tag in self.tags if tag.kind != kind.value]
        fresh = []
        seen = set()
        for name in names:
            name = name.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            tag = existing.get(name) or PostTag(kind=kind.value, name=name)
            tag.position = len(fresh)
            fresh.append(tag)
        self.tags = others + fresh

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value


class PostTag(Base):
    """One tech-stack or skill label on a post (array column replacement)."""
    __tablename__ = "post_tags"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(10), nullable=False)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    post = relationship("Post", back_populates="tags")

    __table_args__ = (
        UniqueConstraint('post_id', 'kind', 'name', name='uq_post_tags_post_kind_name'),
        # hasSome lookups and trending tag aggregation
        Index('idx_post_tags_kind_name', 'kind', 'name'),
    )

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portlink.database.config import Base
from portlink.models.enums import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value, server_default=UserRole.USER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship(
        "Profile", back_populates="user", uselist=False, lazy="selectin",
        cascade="all, delete-orphan",
    )
    posts = relationship("Post", back_populates="author", lazy="raise", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(100))
    bio = Column(Text)
    # Filtered on by the feed through author -> profile
    profession = Column(String(30), index=True)
    is_open_to_work = Column(Boolean, nullable=False, default=False, server_default=false())

    user = relationship("User", back_populates="profile")

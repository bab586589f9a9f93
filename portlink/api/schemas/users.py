from datetime import datetime
from typing import Optional

from pydantic import Field

from portlink.api.schemas.base import CamelModel
from portlink.models.enums import Profession, UserRole


class ProfileResponse(CamelModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    profession: Optional[Profession] = None
    is_open_to_work: bool = False


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    profile: Optional[ProfileResponse] = None


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    profession: Optional[Profession] = None
    is_open_to_work: bool = False


class ProfileUpdate(CamelModel):
    """Only fields present in the body are changed"""
    name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    profession: Optional[Profession] = None
    is_open_to_work: Optional[bool] = None

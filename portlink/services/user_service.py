from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.user import User, Profile
from portlink.services.exceptions import NotFoundError, ConflictError
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        username: str,
        email: str,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        profession: Optional[str] = None,
        is_open_to_work: bool = False,
    ) -> User:
        existing = (await self.db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )).first()
        if existing:
            raise ConflictError("Username or email already registered")

        user = User(
            username=username,
            email=email,
            profile=Profile(
                name=name,
                bio=bio,
                profession=profession,
                is_open_to_work=is_open_to_work,
            ),
        )
        self.db.add(user)
        await self.db.commit()
        logger.info(f"👤 Registered user {user.id} ({username})")
        # created_at is filled in by the database
        return await self.get(user.id, refresh=True)

    async def get(self, user_id: int, refresh: bool = False) -> User:
        query = select(User).where(User.id == user_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        user = (await self.db.execute(query)).scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: int, changes: dict) -> User:
        """
        Apply profile changes. Profession and open-to-work feed the author
        filters on the feed, but cached pages are not invalidated for them.
        """
        user = await self.get(user_id)
        if user.profile is None:
            user.profile = Profile()

        for field_name in ("name", "bio", "profession", "is_open_to_work"):
            if field_name in changes:
                setattr(user.profile, field_name, changes[field_name])

        await self.db.commit()
        return user

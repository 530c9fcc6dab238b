from typing import Optional, List, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
import uuid

from circles.models.user import User
from circles.repositories.filters import json_list_contains, locked


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, username: str, email: str, hashed_password: str, name: str) -> User:
        """Create a new user"""
        db_user = User(
            username=username,
            email=email,
            hashed_password=hashed_password,
            name=name,
        )
        self.db.add(db_user)
        await self.db.flush()
        return db_user

    async def get_by_id(self, user_id: uuid.UUID, for_update: bool = False) -> Optional[User]:
        """Get user by ID, optionally row-locked"""
        query = select(User).filter(User.id == user_id)
        if for_update:
            query = locked(query)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_ids(self, user_ids: Iterable[uuid.UUID], for_update: bool = False) -> List[User]:
        """Get users by ID, keeping the order of the given ids"""
        user_ids = list(user_ids)
        if not user_ids:
            return []
        query = select(User).filter(User.id.in_(user_ids))
        if for_update:
            # Lock in id order so concurrent callers cannot deadlock
            query = locked(query.order_by(User.id))
        result = await self.db.execute(query)
        by_id = {user.id: user for user in result.scalars().all()}
        return [by_id[user_id] for user_id in user_ids if user_id in by_id]

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        query = select(User).filter(User.email == email)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        query = select(User).filter(User.username == username)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def search(self, name: str, current_user_id: uuid.UUID) -> List[User]:
        """Search users by name, excluding the current user"""
        query = select(User).where(
            and_(
                User.id != current_user_id,
                User.name.icontains(name, autoescape=True),
            )
        ).order_by(User.name)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_friends_of(self, user_id: uuid.UUID, for_update: bool = False) -> List[User]:
        """Users whose friends set names the given user"""
        query = select(User).where(json_list_contains(User.friends, user_id))
        if for_update:
            query = locked(query.order_by(User.id))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, user: User, update_data: dict) -> User:
        """Apply field updates to a user"""
        for field, value in update_data.items():
            setattr(user, field, value)
        await self.db.flush()
        return user

    async def delete(self, user: User) -> None:
        """Delete user record only; see ReferenceMaintainer for the cascade"""
        await self.db.delete(user)
        await self.db.flush()

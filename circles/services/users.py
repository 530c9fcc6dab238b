from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import status
import logging
import uuid

from circles.models.user import User
from circles.repositories.post import PostRepository
from circles.repositories.user import UserRepository
from circles.schemas.post import PostRead
from circles.schemas.user import UserPublic, UserUpdate, UserWithPosts
from circles.services.references import ReferenceMaintainer
from circles.utils.exceptions import AuthorizationError, NotFoundError
from circles.utils.ids import to_entity_ids

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.posts = PostRepository(db)
        self.references = ReferenceMaintainer(db)

    async def _get_user(self, user_id: uuid.UUID, for_update: bool = False) -> User:
        user = await self.users.get_by_id(user_id, for_update=for_update)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def _get_own_user(self, user_id: uuid.UUID, actor_id: uuid.UUID, action: str) -> User:
        user = await self._get_user(user_id, for_update=True)
        if user.id != actor_id:
            logger.warning(f"User {actor_id} tried to {action} user {user_id}")
            raise AuthorizationError(
                f"You are not authorized to {action} this user",
                status_code=status.HTTP_403_FORBIDDEN
            )
        return user

    async def search_users(self, current_user_id: uuid.UUID, search: Optional[str] = None) -> List[User]:
        """Search by name, case-insensitive; an empty search lists everyone else"""
        return await self.users.search((search or "").strip(), current_user_id)

    async def get_user(self, user_id: uuid.UUID) -> UserWithPosts:
        """User profile with authored posts attached"""
        user = await self._get_user(user_id)
        posts = await self.posts.get_by_ids(to_entity_ids(user.posts))
        profile = UserPublic.model_validate(user).model_dump(exclude={"posts"})
        return UserWithPosts(**profile, posts=[PostRead.model_validate(post) for post in posts])

    async def update_user(self, user_id: uuid.UUID, actor_id: uuid.UUID, user_data: UserUpdate) -> User:
        user = await self._get_own_user(user_id, actor_id, "update")
        await self.users.update(user, user_data.model_dump(exclude_unset=True, exclude_none=True))
        await self.db.commit()
        return user

    async def delete_user(self, user_id: uuid.UUID, actor_id: uuid.UUID) -> None:
        user = await self._get_own_user(user_id, actor_id, "delete")
        await self.references.delete_user(user)

    async def unfriend(self, user_id: uuid.UUID, friend_id: uuid.UUID) -> User:
        return await self.references.unfriend(user_id, friend_id)

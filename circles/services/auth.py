from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from circles.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from circles.models.user import User
from circles.repositories.user import UserRepository
from circles.schemas.auth import ChangePasswordRequest, RegisterRequest
from circles.utils.exceptions import AuthenticationError, ConflictError, ValidationError
from circles.utils.ids import to_entity_id

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def register(self, user_data: RegisterRequest) -> User:
        """Register a new user"""
        if await self.user_repo.get_by_username(user_data.username):
            raise ConflictError("document with that username already exists")
        if await self.user_repo.get_by_email(user_data.email):
            raise ConflictError("document with that email already exists")

        user = await self.user_repo.create(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            name=user_data.name,
        )
        await self.db.commit()
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def authenticate(self, username: str, password: str) -> Tuple[str, str]:
        """Check credentials and issue an access and a refresh token"""
        user = await self.user_repo.get_by_username(username)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid username or password")
        return create_access_token(user.id), create_refresh_token(user.id)

    async def refresh_access_token(self, refresh_token: Optional[str]) -> str:
        """Issue a new access token from a refresh token"""
        payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE) if refresh_token else None
        if not payload:
            raise AuthenticationError("Unauthorized")
        user = await self.user_repo.get_by_id(to_entity_id(payload.get("id")))
        if not user:
            raise AuthenticationError("Unauthorized")
        return create_access_token(user.id)

    async def get_user(self, user_id: uuid.UUID, for_update: bool = False) -> User:
        user = await self.user_repo.get_by_id(user_id, for_update=for_update)
        if not user:
            raise AuthenticationError("Unauthorized")
        return user

    async def change_password(self, user_id: uuid.UUID, data: ChangePasswordRequest) -> None:
        user = await self.get_user(user_id, for_update=True)
        if not verify_password(data.password, user.hashed_password):
            raise ValidationError("Invalid password")
        await self.user_repo.update(user, {"hashed_password": get_password_hash(data.new_password)})
        await self.db.commit()
        logger.info(f"User {user.id} changed password")

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_, and_
from sqlalchemy.orm import selectinload
import uuid

from circles.models.friend_request import FriendRequest
from circles.repositories.filters import locked
from circles.schemas.friend_request import FriendRequestStatus


class FriendRequestRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, sender_id: uuid.UUID, receiver_id: uuid.UUID) -> FriendRequest:
        """Create a new pending friend request"""
        friend_request = FriendRequest(
            sender_id=sender_id,
            receiver_id=receiver_id,
            status=FriendRequestStatus.PENDING.value
        )
        self.db.add(friend_request)
        await self.db.flush()
        return friend_request

    async def get_by_id(self, request_id: uuid.UUID, for_update: bool = False) -> Optional[FriendRequest]:
        """Get a specific friend request by ID"""
        stmt = select(FriendRequest).where(FriendRequest.id == request_id)
        if for_update:
            stmt = locked(stmt)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending_received(self, user_id: uuid.UUID) -> List[FriendRequest]:
        """Pending requests addressed to the user, senders loaded"""
        stmt = select(FriendRequest).options(
            selectinload(FriendRequest.sender)
        ).where(
            and_(
                FriendRequest.receiver_id == user_id,
                FriendRequest.status == FriendRequestStatus.PENDING.value
            )
        ).order_by(FriendRequest.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def set_status(self, friend_request: FriendRequest, status: FriendRequestStatus) -> FriendRequest:
        friend_request.status = status.value
        await self.db.flush()
        return friend_request

    async def delete_for_user(self, user_id: uuid.UUID) -> int:
        """Delete every request naming the user as either party"""
        result = await self.db.execute(
            delete(FriendRequest).where(
                or_(
                    FriendRequest.sender_id == user_id,
                    FriendRequest.receiver_id == user_id
                )
            ).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

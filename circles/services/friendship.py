from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import status
import logging
import uuid

from circles.models.friend_request import FriendRequest
from circles.models.user import User
from circles.repositories.friend_request import FriendRequestRepository
from circles.repositories.user import UserRepository
from circles.schemas.friend_request import FriendRequestStatus
from circles.services.references import ReferenceMaintainer
from circles.utils.exceptions import (
    AuthorizationError, ConflictError, InvalidOperationError, NotFoundError
)
from circles.utils.ids import to_entity_id, to_entity_ids

logger = logging.getLogger(__name__)


class FriendshipService:
    """Friend request lifecycle: pending -> accepted | rejected.

    Accepted and rejected are terminal. Acceptance is the only transition
    with a side effect on the graph: both users enter each other's friends
    set, committed together with the status change.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = FriendRequestRepository(db)
        self.users = UserRepository(db)
        self.references = ReferenceMaintainer(db)

    async def send_friend_request(self, sender_id: uuid.UUID, receiver: Optional[str]) -> FriendRequest:
        """Send a friend request"""
        if not receiver:
            raise NotFoundError("Receiver not found")
        receiver_id = to_entity_id(receiver, "receiver")
        if receiver_id == sender_id:
            raise InvalidOperationError("You cannot send a friend request to yourself")

        sender = await self.users.get_by_id(sender_id)
        if not sender:
            raise NotFoundError("User not found")
        if not await self.users.get_by_id(receiver_id):
            raise NotFoundError("Receiver not found")
        if sender.is_friend_of(receiver_id):
            raise ConflictError("You are already friends")

        # A second pending request between the same pair is allowed
        friend_request = await self.repo.create(sender_id, receiver_id)
        await self.db.commit()
        logger.info(f"User {sender_id} sent friend request {friend_request.id} to {receiver_id}")
        return friend_request

    async def _get_pending_for_receiver(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> FriendRequest:
        friend_request = await self.repo.get_by_id(request_id, for_update=True)
        if not friend_request:
            raise NotFoundError("Friend request not found")
        if friend_request.receiver_id != actor_id:
            logger.warning(f"User {actor_id} tried to answer friend request {request_id} addressed to someone else")
            raise AuthorizationError(
                "You are not authorized to answer this friend request",
                status_code=status.HTTP_403_FORBIDDEN
            )
        if friend_request.status != FriendRequestStatus.PENDING.value:
            raise InvalidOperationError(f"Friend request already {friend_request.status}")
        return friend_request

    async def accept_friend_request(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> FriendRequest:
        """Accept a pending request and make both users friends"""
        friend_request = await self._get_pending_for_receiver(request_id, actor_id)
        await self.repo.set_status(friend_request, FriendRequestStatus.ACCEPTED)
        await self.references.befriend(friend_request.sender_id, friend_request.receiver_id)
        logger.info(f"Friend request {request_id} accepted")
        return friend_request

    async def reject_friend_request(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> FriendRequest:
        """Reject a pending request; friends sets are untouched"""
        friend_request = await self._get_pending_for_receiver(request_id, actor_id)
        await self.repo.set_status(friend_request, FriendRequestStatus.REJECTED)
        await self.db.commit()
        logger.info(f"Friend request {request_id} rejected")
        return friend_request

    async def list_pending_requests(self, user_id: uuid.UUID) -> List[FriendRequest]:
        """Pending requests received by the user"""
        return await self.repo.list_pending_received(user_id)

    async def list_friends(self, user_id: uuid.UUID) -> List[User]:
        """Friends of the user as full records"""
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return await self.users.get_by_ids(to_entity_ids(user.friends))

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from circles.api.deps import get_current_user_id
from circles.core.database import get_db
from circles.schemas.common import DataResponse
from circles.schemas.friend_request import (
    FriendRequestCreate, FriendRequestRead, FriendRequestWithSender
)
from circles.services.friendship import FriendshipService
from circles.utils.ids import to_entity_id

router = APIRouter()


@router.get("", response_model=DataResponse[List[FriendRequestWithSender]])
async def get_friend_requests(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Pending friend requests sent to the authenticated user"""
    service = FriendshipService(db)
    requests = await service.list_pending_requests(current_user_id)
    return {"success": True, "data": requests}


@router.post("", response_model=DataResponse[FriendRequestRead], status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request_data: FriendRequestCreate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Send a friend request to another user"""
    service = FriendshipService(db)
    friend_request = await service.send_friend_request(current_user_id, request_data.receiver)
    return {"success": True, "data": friend_request, "message": "Friend request sent"}


@router.patch("/{request_id}/accept", response_model=DataResponse[FriendRequestRead])
async def accept_friend_request(
    request_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Accept a friend request addressed to the authenticated user"""
    service = FriendshipService(db)
    friend_request = await service.accept_friend_request(to_entity_id(request_id), current_user_id)
    return {"success": True, "data": friend_request, "message": "Accepted friend request"}


@router.patch("/{request_id}/reject", response_model=DataResponse[FriendRequestRead])
async def reject_friend_request(
    request_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Reject a friend request addressed to the authenticated user"""
    service = FriendshipService(db)
    friend_request = await service.reject_friend_request(to_entity_id(request_id), current_user_id)
    return {"success": True, "data": friend_request, "message": "Rejected friend request"}

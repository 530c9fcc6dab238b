from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from circles.api.deps import get_current_user_id
from circles.core.database import get_db
from circles.schemas.common import DataResponse, MessageResponse
from circles.schemas.user import UserPublic, UserUpdate, UserWithPosts
from circles.services.friendship import FriendshipService
from circles.services.users import UserService
from circles.utils.ids import to_entity_id

router = APIRouter()


@router.get("", response_model=DataResponse[List[UserPublic]])
async def get_users(
    search: Optional[str] = Query(None, description="Case-insensitive search on the name"),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Search users other than the authenticated one"""
    service = UserService(db)
    users = await service.search_users(current_user_id, search)
    return {"success": True, "data": users}


@router.get("/{user_id}", response_model=DataResponse[UserWithPosts])
async def get_user(
    user_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Get a user profile with their posts"""
    service = UserService(db)
    user = await service.get_user(to_entity_id(user_id))
    return {"success": True, "data": user}


@router.patch("/{user_id}", response_model=DataResponse[UserPublic])
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Update the authenticated user's profile"""
    service = UserService(db)
    user = await service.update_user(to_entity_id(user_id), current_user_id, user_data)
    return {"success": True, "data": user}


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete the authenticated user's account and everything referencing it"""
    service = UserService(db)
    await service.delete_user(to_entity_id(user_id), current_user_id)
    return {"success": True, "message": "User deleted successfully"}


@router.get("/{user_id}/friends", response_model=DataResponse[List[UserPublic]])
async def get_friends(
    user_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Friends of the authenticated user"""
    service = FriendshipService(db)
    friends = await service.list_friends(current_user_id)
    return {"success": True, "data": friends}


@router.delete("/{user_id}/unfriend", response_model=DataResponse[UserPublic])
async def unfriend(
    user_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Remove the friendship with the given user on both sides"""
    service = UserService(db)
    user = await service.unfriend(current_user_id, to_entity_id(user_id))
    return {"success": True, "data": user, "message": "Unfriended successfully"}

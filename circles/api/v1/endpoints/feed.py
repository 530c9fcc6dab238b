from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from circles.api.deps import get_current_user_id
from circles.core.config import settings
from circles.core.database import get_db
from circles.schemas.common import PageResponse
from circles.schemas.feed import FriendCommentPost, PostWithAuthor
from circles.services.feed import FeedService

router = APIRouter()


@router.get("", response_model=PageResponse[PostWithAuthor])
async def get_feed(
    page: int = Query(1, ge=1, description="Page number to retrieve"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Number of posts per page"),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Posts written by the user's friends"""
    service = FeedService(db)
    result = await service.get_feed(current_user_id, page, limit)
    return result.to_response()


@router.get("/friend-comment", response_model=PageResponse[FriendCommentPost])
async def get_friend_comment_feed(
    page: int = Query(1, ge=1, description="Page number to retrieve"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Number of posts per page"),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Posts by non-friends that friends have commented on"""
    service = FeedService(db)
    result = await service.get_friend_comment_feed(current_user_id, page, limit)
    return result.to_response()


@router.get("/friend-liked", response_model=PageResponse[PostWithAuthor])
async def get_friend_liked_feed(
    page: int = Query(1, ge=1, description="Page number to retrieve"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Number of posts per page"),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Posts by non-friends that friends have liked"""
    service = FeedService(db)
    result = await service.get_friend_liked_feed(current_user_id, page, limit)
    return result.to_response()

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from circles.api.deps import get_current_user_id
from circles.core.config import settings
from circles.core.database import get_db
from circles.schemas.common import DataResponse, PageResponse
from circles.schemas.feed import CommentWithAuthor, PostDetail
from circles.schemas.post import (
    CommentCreate, CommentRead, CommentUpdate, PostCreate, PostRead, PostUpdate
)
from circles.services.likes import LikeService, like_message
from circles.services.posts import PostService
from circles.utils.ids import to_entity_id

router = APIRouter()


@router.get("", response_model=PageResponse[PostRead])
async def list_posts(
    page: int = Query(1, ge=1, description="Page number to retrieve"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Number of posts per page"),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List the authenticated user's posts, newest first"""
    service = PostService(db)
    result = await service.list_own_posts(current_user_id, page, limit)
    return result.to_response()


@router.post("", response_model=DataResponse[PostRead], status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Create a post"""
    service = PostService(db)
    post = await service.create_post(current_user_id, post_data)
    return {"success": True, "data": post}


@router.get("/{post_id}", response_model=DataResponse[PostDetail])
async def get_post(
    post_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Get a post with its author and liking users"""
    service = PostService(db)
    post = await service.get_post(to_entity_id(post_id))
    return {"success": True, "data": post}


@router.patch("/{post_id}", response_model=DataResponse[PostRead])
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Update a post owned by the authenticated user"""
    service = PostService(db)
    post = await service.update_post(to_entity_id(post_id), current_user_id, post_data)
    return {"success": True, "data": post}


@router.delete("/{post_id}", response_model=DataResponse[PostRead])
async def delete_post(
    post_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a post and its comments"""
    service = PostService(db)
    post = await service.delete_post(to_entity_id(post_id), current_user_id)
    return {"success": True, "data": post}


@router.patch("/{post_id}/toggle-like", response_model=DataResponse[PostRead])
async def toggle_like_post(
    post_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Like the post, or remove the like if already present"""
    service = LikeService(db)
    post, added = await service.toggle_post_like(to_entity_id(post_id), current_user_id)
    return {"success": True, "data": post, "message": like_message(added)}


@router.get("/{post_id}/comment", response_model=DataResponse[List[CommentWithAuthor]])
async def list_comments(
    post_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List comments of a post, oldest first"""
    service = PostService(db)
    comments = await service.list_comments(to_entity_id(post_id))
    return {"success": True, "data": comments}


@router.post("/{post_id}/comment", response_model=DataResponse[CommentRead], status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Comment on a post"""
    service = PostService(db)
    comment = await service.create_comment(to_entity_id(post_id), current_user_id, comment_data)
    return {"success": True, "data": comment}


@router.patch("/{post_id}/comment/{comment_id}", response_model=DataResponse[CommentRead])
async def update_comment(
    post_id: str,
    comment_id: str,
    comment_data: CommentUpdate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Update a comment owned by the authenticated user"""
    service = PostService(db)
    comment = await service.update_comment(
        to_entity_id(post_id), to_entity_id(comment_id, "commentId"), current_user_id, comment_data
    )
    return {"success": True, "data": comment}


@router.delete("/{post_id}/comment/{comment_id}", response_model=DataResponse[CommentRead])
async def delete_comment(
    post_id: str,
    comment_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a comment owned by the authenticated user"""
    service = PostService(db)
    comment = await service.delete_comment(
        to_entity_id(post_id), to_entity_id(comment_id, "commentId"), current_user_id
    )
    return {"success": True, "data": comment}


@router.patch("/{post_id}/comment/{comment_id}/toggle-like", response_model=DataResponse[CommentRead])
async def toggle_like_comment(
    post_id: str,
    comment_id: str,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Like the comment, or remove the like if already present"""
    service = LikeService(db)
    comment, added = await service.toggle_comment_like(
        to_entity_id(post_id), to_entity_id(comment_id, "commentId"), current_user_id
    )
    return {"success": True, "data": comment, "message": like_message(added)}

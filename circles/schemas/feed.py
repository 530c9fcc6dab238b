from typing import List, Optional
from datetime import datetime
import uuid

from circles.schemas.common import CamelModel
from circles.schemas.post import PostRead, CommentRead
from circles.schemas.user import UserPublic


class PostWithAuthor(PostRead):
    author: UserPublic


class PostDetail(PostWithAuthor):
    liked_by: List[UserPublic] = []


class CommentWithAuthor(CommentRead):
    author: UserPublic


class FriendCommentPost(CamelModel):
    """A stranger's post carrying only the comments written by friends"""
    id: uuid.UUID
    title: str
    content: str
    author: UserPublic
    created_at: datetime
    updated_at: Optional[datetime] = None
    comments: List[CommentRead] = []

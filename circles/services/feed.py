from typing import Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from circles.models.comment import Comment
from circles.repositories.feed import FeedRepository
from circles.repositories.user import UserRepository
from circles.schemas.feed import FriendCommentPost, PostWithAuthor
from circles.schemas.post import CommentRead
from circles.schemas.user import UserPublic
from circles.utils.exceptions import NotFoundError
from circles.utils.ids import to_entity_ids
from circles.utils.pagination import Page, page_offset

logger = logging.getLogger(__name__)


class FeedService:
    """Paginated views over posts derived from the requester's friends set.

    All feeds are ordered newest first, ties broken by id, and a page past
    the end yields no items but still reports the totals.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = FeedRepository(db)
        self.users = UserRepository(db)

    async def _friend_ids(self, requester_id: uuid.UUID) -> List[uuid.UUID]:
        user = await self.users.get_by_id(requester_id)
        if not user:
            raise NotFoundError("User not found")
        return to_entity_ids(user.friends)

    async def get_feed(self, requester_id: uuid.UUID, page: int = 1, limit: int = 10) -> Page[PostWithAuthor]:
        """Posts written by the requester's friends"""
        skip = page_offset(page, limit)
        friend_ids = await self._friend_ids(requester_id)
        posts, count = await self.repo.friends_posts(friend_ids, skip, limit)
        items = [PostWithAuthor.model_validate(post) for post in posts]
        return Page(items=items, count=count, page=page, limit=limit)

    async def get_friend_comment_feed(
        self, requester_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> Page[FriendCommentPost]:
        """Strangers' posts that friends commented on, with only those comments"""
        skip = page_offset(page, limit)
        friend_ids = await self._friend_ids(requester_id)

        post_ids, count = await self.repo.friend_commented_post_ids(friend_ids, skip, limit)
        posts = await self.repo.posts_with_authors(post_ids)
        comments = await self.repo.comments_by_authors(post_ids, friend_ids)

        grouped: Dict[uuid.UUID, List[Comment]] = {}
        for comment in comments:
            grouped.setdefault(comment.post_id, []).append(comment)

        items = [
            FriendCommentPost(
                id=post.id,
                title=post.title,
                content=post.content,
                author=UserPublic.model_validate(post.author),
                created_at=post.created_at,
                updated_at=post.updated_at,
                comments=[CommentRead.model_validate(comment) for comment in grouped.get(post.id, [])],
            )
            for post in posts
        ]
        return Page(items=items, count=count, page=page, limit=limit)

    async def get_friend_liked_feed(
        self, requester_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> Page[PostWithAuthor]:
        """Strangers' posts liked by at least one friend"""
        skip = page_offset(page, limit)
        friend_ids = await self._friend_ids(requester_id)
        posts, count = await self.repo.friend_liked_posts(friend_ids, skip, limit)
        items = [PostWithAuthor.model_validate(post) for post in posts]
        return Page(items=items, count=count, page=page, limit=limit)

from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from circles.models.comment import Comment
from circles.models.post import Post
from circles.repositories.comment import CommentRepository
from circles.repositories.post import PostRepository
from circles.utils.exceptions import NotFoundError
from circles.utils.ids import add_to_set, remove_from_set

logger = logging.getLogger(__name__)


def toggle_membership(values: List[str], user_id: uuid.UUID) -> Tuple[List[str], bool]:
    """Remove the user if present, add otherwise; reports whether it was added"""
    if str(user_id) in values:
        return remove_from_set(values, user_id), False
    return add_to_set(values, user_id), True


def like_message(added: bool) -> str:
    return f"Like {'added' if added else 'removed'}"


class LikeService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)

    async def toggle_post_like(self, post_id: uuid.UUID, user_id: uuid.UUID) -> Tuple[Post, bool]:
        post = await self.posts.get_by_id(post_id, for_update=True)
        if not post:
            raise NotFoundError("Post not found")
        post.liked_by, added = toggle_membership(post.liked_by, user_id)
        await self.db.commit()
        logger.info(f"User {user_id} {'liked' if added else 'unliked'} post {post.id}")
        return post, added

    async def toggle_comment_like(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID
    ) -> Tuple[Comment, bool]:
        if not await self.posts.get_by_id(post_id):
            raise NotFoundError("Post not found")
        comment = await self.comments.get_by_id(comment_id, for_update=True)
        if not comment or comment.post_id != post_id:
            raise NotFoundError("Comment not found")
        comment.liked_by, added = toggle_membership(comment.liked_by, user_id)
        await self.db.commit()
        logger.info(f"User {user_id} {'liked' if added else 'unliked'} comment {comment.id}")
        return comment, added

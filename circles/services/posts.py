from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from circles.models.comment import Comment
from circles.models.post import Post
from circles.repositories.comment import CommentRepository
from circles.repositories.post import PostRepository
from circles.repositories.user import UserRepository
from circles.schemas.feed import PostDetail
from circles.schemas.user import UserPublic
from circles.schemas.post import CommentCreate, CommentUpdate, PostCreate, PostUpdate
from circles.services.references import ReferenceMaintainer
from circles.utils.exceptions import AuthorizationError, NotFoundError
from circles.utils.ids import to_entity_ids
from circles.utils.pagination import Page, page_offset

logger = logging.getLogger(__name__)


class PostService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.users = UserRepository(db)
        self.references = ReferenceMaintainer(db)

    async def _get_post(self, post_id: uuid.UUID, with_author: bool = False, for_update: bool = False) -> Post:
        post = await self.posts.get_by_id(post_id, with_author=with_author, for_update=for_update)
        if not post:
            raise NotFoundError("Post not found")
        return post

    async def _get_owned_post(self, post_id: uuid.UUID, user_id: uuid.UUID, action: str) -> Post:
        post = await self._get_post(post_id, for_update=True)
        if post.author_id != user_id:
            logger.warning(f"User {user_id} tried to {action} post {post_id} owned by {post.author_id}")
            raise AuthorizationError(f"You are not authorized to {action} this post")
        return post

    async def _get_owned_comment(self, post_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID, action: str) -> Comment:
        comment = await self.comments.get_by_id(comment_id, for_update=True)
        if not comment or comment.post_id != post_id:
            raise NotFoundError("Comment not found")
        if comment.author_id != user_id:
            logger.warning(f"User {user_id} tried to {action} comment {comment_id} owned by {comment.author_id}")
            raise AuthorizationError(f"You are not authorized to {action} this comment")
        return comment

    async def list_own_posts(self, user_id: uuid.UUID, page: int = 1, limit: int = 10) -> Page[Post]:
        skip = page_offset(page, limit)
        posts, count = await self.posts.list_by_author(user_id, skip, limit)
        return Page(items=posts, count=count, page=page, limit=limit)

    async def get_post(self, post_id: uuid.UUID) -> PostDetail:
        """Post with its author and liking users attached"""
        post = await self._get_post(post_id, with_author=True)
        liked_by = await self.users.get_by_ids(to_entity_ids(post.liked_by))
        return PostDetail(
            id=post.id,
            title=post.title,
            content=post.content,
            author=UserPublic.model_validate(post.author),
            liked_by=[UserPublic.model_validate(user) for user in liked_by],
            comments=post.comments,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    async def create_post(self, user_id: uuid.UUID, post_data: PostCreate) -> Post:
        return await self.references.create_post(user_id, post_data.title, post_data.content)

    async def update_post(self, post_id: uuid.UUID, user_id: uuid.UUID, post_data: PostUpdate) -> Post:
        post = await self._get_owned_post(post_id, user_id, "update")
        await self.posts.update(post, post_data.model_dump(exclude_unset=True, exclude_none=True))
        await self.db.commit()
        return post

    async def delete_post(self, post_id: uuid.UUID, user_id: uuid.UUID) -> Post:
        post = await self._get_owned_post(post_id, user_id, "delete")
        return await self.references.delete_post(post)

    # Comments

    async def list_comments(self, post_id: uuid.UUID) -> List[Comment]:
        await self._get_post(post_id)
        return await self.comments.list_by_post(post_id)

    async def create_comment(self, post_id: uuid.UUID, user_id: uuid.UUID, comment_data: CommentCreate) -> Comment:
        return await self.references.create_comment(post_id, user_id, comment_data.content)

    async def update_comment(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID, comment_data: CommentUpdate
    ) -> Comment:
        comment = await self._get_owned_comment(post_id, comment_id, user_id, "update")
        await self.comments.update(comment, comment_data.model_dump(exclude_unset=True))
        await self.db.commit()
        return comment

    async def delete_comment(self, post_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID) -> Comment:
        await self._get_post(post_id)
        comment = await self._get_owned_comment(post_id, comment_id, user_id, "delete")
        return await self.references.delete_comment(comment)

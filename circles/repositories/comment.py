from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
import uuid

from circles.models.comment import Comment
from circles.repositories.filters import json_list_contains, locked


class CommentRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, post_id: uuid.UUID, author_id: uuid.UUID, content: str) -> Comment:
        """Create a new comment"""
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def get_by_id(self, comment_id: uuid.UUID, for_update: bool = False) -> Optional[Comment]:
        stmt = select(Comment).where(Comment.id == comment_id)
        if for_update:
            stmt = locked(stmt)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_post(self, post_id: uuid.UUID) -> List[Comment]:
        """Comments of a post with authors loaded, oldest first"""
        stmt = select(Comment).options(
            selectinload(Comment.author)
        ).where(Comment.post_id == post_id).order_by(Comment.created_at, Comment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_by_author(self, author_id: uuid.UUID) -> List[Comment]:
        stmt = select(Comment).where(Comment.author_id == author_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_liked_by(self, user_id: uuid.UUID, for_update: bool = False) -> List[Comment]:
        stmt = select(Comment).where(json_list_contains(Comment.liked_by, user_id))
        if for_update:
            stmt = locked(stmt.order_by(Comment.id))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, comment: Comment, update_data: dict) -> Comment:
        for field, value in update_data.items():
            setattr(comment, field, value)
        await self.db.flush()
        return comment

    async def delete(self, comment: Comment) -> None:
        await self.db.delete(comment)
        await self.db.flush()

    async def delete_by_posts(self, post_ids: List[uuid.UUID]) -> int:
        """Delete every comment attached to the given posts"""
        if not post_ids:
            return 0
        result = await self.db.execute(
            delete(Comment).where(Comment.post_id.in_(post_ids)).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def delete_by_author(self, author_id: uuid.UUID) -> int:
        result = await self.db.execute(
            delete(Comment).where(Comment.author_id == author_id).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

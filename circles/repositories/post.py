from typing import Optional, List, Tuple, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload
import uuid

from circles.models.post import Post
from circles.repositories.filters import json_list_contains, locked

NEWEST_FIRST = (Post.created_at.desc(), Post.id.desc())


class PostRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, author_id: uuid.UUID, title: str, content: str) -> Post:
        """Create a new post"""
        post = Post(author_id=author_id, title=title, content=content)
        self.db.add(post)
        await self.db.flush()
        return post

    async def get_by_id(
        self, post_id: uuid.UUID, with_author: bool = False, for_update: bool = False
    ) -> Optional[Post]:
        """Get a post by ID, optionally with its author loaded or row-locked"""
        stmt = select(Post).where(Post.id == post_id)
        if with_author:
            stmt = stmt.options(selectinload(Post.author))
        if for_update:
            stmt = locked(stmt)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, post_ids: Iterable[uuid.UUID], for_update: bool = False) -> List[Post]:
        post_ids = list(post_ids)
        if not post_ids:
            return []
        stmt = select(Post).where(Post.id.in_(post_ids))
        if for_update:
            stmt = locked(stmt.order_by(Post.id))
        else:
            stmt = stmt.order_by(*NEWEST_FIRST)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_by_author(self, author_id: uuid.UUID, skip: int, limit: int) -> Tuple[List[Post], int]:
        """Get posts of an author, newest first, with the total count"""
        count_stmt = select(func.count()).select_from(Post).where(Post.author_id == author_id)
        count_result = await self.db.execute(count_stmt)
        total_count = count_result.scalar()

        stmt = select(Post).where(Post.author_id == author_id).order_by(*NEWEST_FIRST).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total_count

    async def list_ids_by_author(self, author_id: uuid.UUID) -> List[uuid.UUID]:
        stmt = select(Post.id).where(Post.author_id == author_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_liked_by(self, user_id: uuid.UUID, for_update: bool = False) -> List[Post]:
        """Posts whose liked-by set names the user"""
        stmt = select(Post).where(json_list_contains(Post.liked_by, user_id))
        if for_update:
            stmt = locked(stmt.order_by(Post.id))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, post: Post, update_data: dict) -> Post:
        for field, value in update_data.items():
            setattr(post, field, value)
        await self.db.flush()
        return post

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.flush()

    async def delete_by_ids(self, post_ids: List[uuid.UUID]) -> int:
        if not post_ids:
            return 0
        result = await self.db.execute(
            delete(Post).where(Post.id.in_(post_ids)).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

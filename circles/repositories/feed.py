from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from sqlalchemy.orm import selectinload
import uuid

from circles.models.post import Post
from circles.models.comment import Comment
from circles.repositories.filters import json_list_intersects
from circles.repositories.post import NEWEST_FIRST


class FeedRepository:
    """Read-only queries backing the three feeds"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _paginate_posts(self, condition, skip: int, limit: int) -> Tuple[List[Post], int]:
        count_stmt = select(func.count()).select_from(Post).where(condition)
        count_result = await self.db.execute(count_stmt)
        total_count = count_result.scalar()

        stmt = select(Post).options(
            selectinload(Post.author)
        ).where(condition).order_by(*NEWEST_FIRST).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total_count

    async def friends_posts(self, friend_ids: List[uuid.UUID], skip: int, limit: int) -> Tuple[List[Post], int]:
        """Posts authored by any of the friends"""
        return await self._paginate_posts(Post.author_id.in_(friend_ids), skip, limit)

    async def friend_liked_posts(self, friend_ids: List[uuid.UUID], skip: int, limit: int) -> Tuple[List[Post], int]:
        """Strangers' posts liked by at least one friend"""
        condition = and_(
            json_list_intersects(Post.liked_by, friend_ids),
            Post.author_id.not_in(friend_ids),
        )
        return await self._paginate_posts(condition, skip, limit)

    async def friend_commented_post_ids(
        self, friend_ids: List[uuid.UUID], skip: int, limit: int
    ) -> Tuple[List[uuid.UUID], int]:
        """Page of strangers' post ids having at least one friend comment"""
        matching = select(Post.id, Post.created_at).join(
            Comment, Comment.post_id == Post.id
        ).where(
            and_(
                Post.author_id.not_in(friend_ids),
                Comment.author_id.in_(friend_ids),
            )
        ).group_by(Post.id, Post.created_at)

        count_stmt = select(func.count()).select_from(matching.subquery())
        count_result = await self.db.execute(count_stmt)
        total_count = count_result.scalar()

        page_stmt = matching.order_by(*NEWEST_FIRST).offset(skip).limit(limit)
        result = await self.db.execute(page_stmt)
        return [row.id for row in result.all()], total_count

    async def posts_with_authors(self, post_ids: List[uuid.UUID]) -> List[Post]:
        """Load posts with authors, in the order of the given ids"""
        if not post_ids:
            return []
        stmt = select(Post).options(selectinload(Post.author)).where(Post.id.in_(post_ids))
        result = await self.db.execute(stmt)
        by_id = {post.id: post for post in result.scalars().all()}
        return [by_id[post_id] for post_id in post_ids if post_id in by_id]

    async def comments_by_authors(self, post_ids: List[uuid.UUID], author_ids: List[uuid.UUID]) -> List[Comment]:
        """Comments on the given posts written by the given authors, oldest first"""
        if not post_ids:
            return []
        stmt = select(Comment).where(
            and_(
                Comment.post_id.in_(post_ids),
                Comment.author_id.in_(author_ids),
            )
        ).order_by(Comment.created_at, Comment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

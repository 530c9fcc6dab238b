"""Multi-entity mutations of the social graph.

Every back-reference (user.posts, user.friends, post.comments, post.liked_by,
comment.liked_by) is denormalized and the store enforces none of them.  This
module is the only place that changes more than one entity per operation, so
callers never update one side of a relationship without the other.  Each
public method runs as a single unit of work and commits once at the end; the
first failing step raises and nothing after it runs.

Rows whose id lists change are read with a row lock and refreshed from the
store, so concurrent requests serialize on them instead of overwriting each
other's lists.  Users are locked in id order.  Every row also carries a
version counter, and a write based on a stale read fails with StaleDataError
rather than dropping an id.
"""
from typing import Dict, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from circles.models.comment import Comment
from circles.models.post import Post
from circles.models.user import User
from circles.repositories.comment import CommentRepository
from circles.repositories.friend_request import FriendRequestRepository
from circles.repositories.post import PostRepository
from circles.repositories.user import UserRepository
from circles.utils.exceptions import NotFoundError
from circles.utils.ids import add_to_set, remove_from_set

logger = logging.getLogger(__name__)


class ReferenceMaintainer:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.friend_requests = FriendRequestRepository(db)

    async def _lock_user(self, user_id: uuid.UUID) -> User:
        user = await self.users.get_by_id(user_id, for_update=True)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def _lock_pair(self, user_id: uuid.UUID, other_id: uuid.UUID) -> Tuple[User, User]:
        locked = {user.id: user for user in await self.users.get_by_ids([user_id, other_id], for_update=True)}
        if user_id not in locked or other_id not in locked:
            raise NotFoundError("User not found")
        return locked[user_id], locked[other_id]

    # Posts

    async def create_post(self, author_id: uuid.UUID, title: str, content: str) -> Post:
        """Insert a post and register it in the author's post set"""
        author = await self._lock_user(author_id)
        post = await self.posts.create(author.id, title, content)
        author.posts = add_to_set(author.posts, post.id)
        await self.db.commit()
        logger.info(f"User {author.id} created post {post.id}")
        return post

    async def delete_post(self, post: Post) -> Post:
        """Delete a post, its comments and its entry in the author's post set"""
        author = await self.users.get_by_id(post.author_id, for_update=True)
        if author:
            author.posts = remove_from_set(author.posts, post.id)
        removed_comments = await self.comments.delete_by_posts([post.id])
        await self.posts.delete(post)
        await self.db.commit()
        logger.info(f"Deleted post {post.id} with {removed_comments} comments")
        return post

    # Comments

    async def create_comment(self, post_id: uuid.UUID, author_id: uuid.UUID, content: str) -> Comment:
        """Insert a comment and append it to the parent post's comment list"""
        post = await self.posts.get_by_id(post_id, for_update=True)
        if not post:
            raise NotFoundError("Post not found")
        comment = await self.comments.create(post.id, author_id, content)
        post.comments = add_to_set(post.comments, comment.id)
        await self.db.commit()
        logger.info(f"User {author_id} commented {comment.id} on post {post.id}")
        return comment

    async def delete_comment(self, comment: Comment) -> Comment:
        """Delete a comment and drop it from the parent post's comment list"""
        post = await self.posts.get_by_id(comment.post_id, for_update=True)
        if post:
            post.comments = remove_from_set(post.comments, comment.id)
        await self.comments.delete(comment)
        await self.db.commit()
        logger.info(f"Deleted comment {comment.id} from post {comment.post_id}")
        return comment

    # Friendship

    async def befriend(self, user_id: uuid.UUID, other_id: uuid.UUID) -> None:
        """Add each user to the other's friends set.

        Commits together with any pending change on the session, so a
        friend request status update lands in the same unit of work.
        """
        user, other = await self._lock_pair(user_id, other_id)
        user.friends = add_to_set(user.friends, other.id)
        other.friends = add_to_set(other.friends, user.id)
        await self.db.commit()
        logger.info(f"Users {user.id} and {other.id} are now friends")

    async def unfriend(self, user_id: uuid.UUID, other_id: uuid.UUID) -> User:
        """Remove each user from the other's friends set"""
        user, other = await self._lock_pair(user_id, other_id)
        user.friends = remove_from_set(user.friends, other.id)
        other.friends = remove_from_set(other.friends, user.id)
        await self.db.commit()
        logger.info(f"User {user.id} unfriended {other.id}")
        return user

    # Users

    async def delete_user(self, user: User) -> None:
        """Delete a user and every reference to them across the graph"""
        user_id = user.id
        await self.users.delete(user)

        # Authored posts, together with all comments on them
        post_ids = await self.posts.list_ids_by_author(user_id)
        await self.comments.delete_by_posts(post_ids)
        await self.posts.delete_by_ids(post_ids)
        logger.info(f"Cascade for user {user_id}: removed {len(post_ids)} posts")

        for post in await self.posts.list_liked_by(user_id, for_update=True):
            post.liked_by = remove_from_set(post.liked_by, user_id)
        # Locked re-reads below refresh rows, so pending edits go out first
        await self.db.flush()

        for friend in await self.users.list_friends_of(user_id, for_update=True):
            friend.friends = remove_from_set(friend.friends, user_id)
        await self.db.flush()

        removed_requests = await self.friend_requests.delete_for_user(user_id)
        logger.info(f"Cascade for user {user_id}: removed {removed_requests} friend requests")

        # Comments on other users' posts, and their entries in those posts
        authored = await self.comments.list_by_author(user_id)
        by_post: Dict[uuid.UUID, List[uuid.UUID]] = {}
        for comment in authored:
            by_post.setdefault(comment.post_id, []).append(comment.id)
        for post in await self.posts.get_by_ids(by_post.keys(), for_update=True):
            for comment_id in by_post[post.id]:
                post.comments = remove_from_set(post.comments, comment_id)
        await self.db.flush()
        await self.comments.delete_by_author(user_id)
        logger.info(f"Cascade for user {user_id}: removed {len(authored)} comments")

        for comment in await self.comments.list_liked_by(user_id, for_update=True):
            comment.liked_by = remove_from_set(comment.liked_by, user_id)

        await self.db.commit()
        logger.info(f"Deleted user {user_id}")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from circles.models.post import Post
from circles.services.feed import FeedService
from circles.services.likes import LikeService
from circles.services.references import ReferenceMaintainer
from circles.utils.exceptions import NotFoundError, ValidationError
from conftest import make_user

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def create_post(db: AsyncSession, author_id, title: str, minutes: int) -> Post:
    """Create a post with a fixed creation time so ordering is deterministic"""
    post = await ReferenceMaintainer(db).create_post(author_id, title, f"Body of {title}")
    post.created_at = BASE_TIME + timedelta(minutes=minutes)
    await db.commit()
    return post


async def test_feed_lists_friends_posts(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)
    p1 = await create_post(db_session, bob.id, "Bob post", 1)
    await create_post(db_session, carol.id, "Carol post", 2)

    result = await FeedService(db_session).get_feed(alice.id, page=1, limit=10)

    assert [post.id for post in result.items] == [p1.id]
    assert result.items[0].author.username == "bob"
    assert result.to_response()["count"] == 1
    assert result.to_response()["totalPages"] == 1
    assert result.page == 1


async def test_feed_without_friends_is_empty(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    await create_post(db_session, bob.id, "Bob post", 1)

    result = await FeedService(db_session).get_feed(alice.id)

    assert result.items == []
    assert result.count == 0
    assert result.total_pages == 0


async def test_feed_pages_cover_all_posts_newest_first(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    references = ReferenceMaintainer(db_session)
    await references.befriend(alice.id, bob.id)
    await references.befriend(alice.id, carol.id)
    posts = []
    for i in range(5):
        author = bob if i % 2 else carol
        posts.append(await create_post(db_session, author.id, f"Post {i}", i))

    service = FeedService(db_session)
    seen = []
    for page in (1, 2, 3):
        result = await service.get_feed(alice.id, page=page, limit=2)
        assert result.count == 5
        assert result.total_pages == 3
        seen.extend(post.id for post in result.items)

    assert seen == [post.id for post in reversed(posts)]


async def test_feed_page_beyond_end(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)
    await create_post(db_session, bob.id, "Only post", 1)

    result = await FeedService(db_session).get_feed(alice.id, page=5, limit=10)

    assert result.items == []
    assert result.count == 1
    assert result.total_pages == 1
    assert result.page == 5


async def test_feed_rejects_bad_page(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")

    with pytest.raises(ValidationError):
        await FeedService(db_session).get_feed(alice.id, page=0)


async def test_feed_for_unknown_requester(db_session: AsyncSession):
    service = FeedService(db_session)

    with pytest.raises(NotFoundError):
        await service.get_feed(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await service.get_friend_comment_feed(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await service.get_friend_liked_feed(uuid.uuid4())


async def test_friend_comment_feed_attaches_only_friend_comments(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    dave = await make_user(db_session, "dave")
    references = ReferenceMaintainer(db_session)
    await references.befriend(alice.id, bob.id)

    p2 = await create_post(db_session, carol.id, "Carol commented", 1)
    await create_post(db_session, carol.id, "Carol quiet", 2)
    bob_post = await create_post(db_session, bob.id, "Bob own", 3)
    bob_comment = await references.create_comment(p2.id, bob.id, "Bob was here")
    await references.create_comment(p2.id, carol.id, "Carol replies")
    await references.create_comment(p2.id, dave.id, "Dave too")
    await references.create_comment(bob_post.id, bob.id, "Commenting my own post")

    result = await FeedService(db_session).get_friend_comment_feed(alice.id)

    assert result.count == 1
    assert [post.id for post in result.items] == [p2.id]
    item = result.items[0]
    assert item.author.id == carol.id
    assert [comment.id for comment in item.comments] == [bob_comment.id]
    assert item.comments[0].author == bob.id


async def test_friend_comment_feed_groups_comments_per_post(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    dave = await make_user(db_session, "dave")
    references = ReferenceMaintainer(db_session)
    await references.befriend(alice.id, bob.id)
    await references.befriend(alice.id, dave.id)

    older = await create_post(db_session, carol.id, "Older", 1)
    newer = await create_post(db_session, carol.id, "Newer", 2)
    for post in (older, newer):
        await references.create_comment(post.id, bob.id, "From bob")
        await references.create_comment(post.id, dave.id, "From dave")

    service = FeedService(db_session)
    first = await service.get_friend_comment_feed(alice.id, page=1, limit=1)
    second = await service.get_friend_comment_feed(alice.id, page=2, limit=1)

    assert first.count == second.count == 2
    assert first.total_pages == 2
    assert [post.id for post in first.items] == [newer.id]
    assert [post.id for post in second.items] == [older.id]
    for page in (first, second):
        assert {comment.author for comment in page.items[0].comments} == {bob.id, dave.id}


async def test_friend_liked_feed_excludes_friends_posts(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    references = ReferenceMaintainer(db_session)
    likes = LikeService(db_session)
    await references.befriend(alice.id, bob.id)

    p2 = await create_post(db_session, carol.id, "Carol post", 1)
    unliked = await create_post(db_session, carol.id, "Carol unliked", 2)
    bob_post = await create_post(db_session, bob.id, "Bob post", 3)
    await likes.toggle_post_like(p2.id, bob.id)
    await likes.toggle_post_like(bob_post.id, bob.id)
    await likes.toggle_post_like(unliked.id, alice.id)

    service = FeedService(db_session)
    result = await service.get_friend_liked_feed(alice.id)
    assert [post.id for post in result.items] == [p2.id]
    assert result.count == 1

    # Once the author becomes a friend the post leaves this feed
    await references.befriend(alice.id, carol.id)
    result = await service.get_friend_liked_feed(alice.id)
    assert result.items == []
    assert result.count == 0


async def test_friend_liked_feed_follows_unlike(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)
    post = await create_post(db_session, carol.id, "Carol post", 1)
    likes = LikeService(db_session)

    await likes.toggle_post_like(post.id, bob.id)
    assert (await FeedService(db_session).get_friend_liked_feed(alice.id)).count == 1

    await likes.toggle_post_like(post.id, bob.id)
    assert (await FeedService(db_session).get_friend_liked_feed(alice.id)).count == 0


async def collect_single_post_pages(fetch, total: int) -> list:
    """Walk a feed one post per page and return the ids in page order"""
    seen = []
    for page in range(1, total + 1):
        result = await fetch(page=page, limit=1)
        assert result.count == total
        assert result.total_pages == total
        seen.extend(item.id for item in result.items)
    assert (await fetch(page=total + 1, limit=1)).items == []
    return seen


async def test_feed_breaks_timestamp_ties_by_id(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)
    ids = [(await create_post(db_session, bob.id, f"Post {i}", 7)).id for i in range(4)]

    service = FeedService(db_session)
    seen = await collect_single_post_pages(lambda **kw: service.get_feed(alice.id, **kw), len(ids))

    assert seen == sorted(ids, reverse=True)


async def test_friend_liked_feed_breaks_timestamp_ties_by_id(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)
    likes = LikeService(db_session)
    ids = []
    for i in range(4):
        post = await create_post(db_session, carol.id, f"Carol {i}", 7)
        await likes.toggle_post_like(post.id, bob.id)
        ids.append(post.id)

    service = FeedService(db_session)
    seen = await collect_single_post_pages(lambda **kw: service.get_friend_liked_feed(alice.id, **kw), len(ids))

    assert seen == sorted(ids, reverse=True)


async def test_friend_comment_feed_breaks_timestamp_ties_by_id(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    references = ReferenceMaintainer(db_session)
    await references.befriend(alice.id, bob.id)
    ids = []
    for i in range(4):
        post = await create_post(db_session, carol.id, f"Carol {i}", 7)
        await references.create_comment(post.id, bob.id, f"Comment {i}")
        ids.append(post.id)

    service = FeedService(db_session)
    seen = await collect_single_post_pages(
        lambda **kw: service.get_friend_comment_feed(alice.id, **kw), len(ids)
    )

    assert seen == sorted(ids, reverse=True)

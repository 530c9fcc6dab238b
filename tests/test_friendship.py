import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from circles.schemas.friend_request import FriendRequestStatus
from circles.services.friendship import FriendshipService
from circles.services.references import ReferenceMaintainer
from circles.utils.exceptions import (
    AuthorizationError, ConflictError, InvalidOperationError, NotFoundError, ValidationError
)
from conftest import make_user


async def test_send_friend_request_creates_pending_request(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")

    service = FriendshipService(db_session)
    friend_request = await service.send_friend_request(alice.id, str(bob.id))

    assert friend_request.sender_id == alice.id
    assert friend_request.receiver_id == bob.id
    assert friend_request.status == FriendRequestStatus.PENDING.value

    pending = await service.list_pending_requests(bob.id)
    assert [r.id for r in pending] == [friend_request.id]
    assert pending[0].sender.username == "alice"
    assert await service.list_pending_requests(alice.id) == []


async def test_send_friend_request_without_receiver(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")

    with pytest.raises(NotFoundError):
        await FriendshipService(db_session).send_friend_request(alice.id, None)
    with pytest.raises(NotFoundError):
        await FriendshipService(db_session).send_friend_request(alice.id, "")


async def test_send_friend_request_to_unknown_receiver(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")

    with pytest.raises(NotFoundError):
        await FriendshipService(db_session).send_friend_request(alice.id, str(uuid.uuid4()))


async def test_send_friend_request_with_malformed_receiver(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")

    with pytest.raises(ValidationError):
        await FriendshipService(db_session).send_friend_request(alice.id, "bob")


async def test_send_friend_request_to_self(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")

    with pytest.raises(InvalidOperationError):
        await FriendshipService(db_session).send_friend_request(alice.id, str(alice.id))


async def test_send_friend_request_to_existing_friend(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    await ReferenceMaintainer(db_session).befriend(alice.id, bob.id)

    with pytest.raises(ConflictError):
        await FriendshipService(db_session).send_friend_request(alice.id, str(bob.id))
    with pytest.raises(ConflictError):
        await FriendshipService(db_session).send_friend_request(bob.id, str(alice.id))


async def test_duplicate_pending_requests_are_allowed(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = FriendshipService(db_session)

    first = await service.send_friend_request(alice.id, str(bob.id))
    second = await service.send_friend_request(alice.id, str(bob.id))

    assert first.id != second.id
    assert len(await service.list_pending_requests(bob.id)) == 2


async def test_accept_makes_friendship_symmetric(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = FriendshipService(db_session)
    friend_request = await service.send_friend_request(alice.id, str(bob.id))

    accepted = await service.accept_friend_request(friend_request.id, bob.id)

    assert accepted.status == FriendRequestStatus.ACCEPTED.value
    await db_session.refresh(alice)
    await db_session.refresh(bob)
    assert alice.friends == [str(bob.id)]
    assert bob.friends == [str(alice.id)]
    assert [u.id for u in await service.list_friends(alice.id)] == [bob.id]
    assert await service.list_pending_requests(bob.id) == []


async def test_reject_leaves_friends_untouched(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = FriendshipService(db_session)
    friend_request = await service.send_friend_request(alice.id, str(bob.id))

    rejected = await service.reject_friend_request(friend_request.id, bob.id)

    assert rejected.status == FriendRequestStatus.REJECTED.value
    await db_session.refresh(alice)
    await db_session.refresh(bob)
    assert alice.friends == []
    assert bob.friends == []


async def test_answered_requests_are_terminal(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = FriendshipService(db_session)
    friend_request = await service.send_friend_request(alice.id, str(bob.id))
    await service.reject_friend_request(friend_request.id, bob.id)

    with pytest.raises(InvalidOperationError):
        await service.accept_friend_request(friend_request.id, bob.id)
    with pytest.raises(InvalidOperationError):
        await service.reject_friend_request(friend_request.id, bob.id)

    await db_session.refresh(bob)
    assert bob.friends == []


async def test_only_receiver_may_answer(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    service = FriendshipService(db_session)
    friend_request = await service.send_friend_request(alice.id, str(bob.id))

    for actor in (alice, carol):
        with pytest.raises(AuthorizationError) as exc_info:
            await service.accept_friend_request(friend_request.id, actor.id)
        assert exc_info.value.status_code == 403

    await db_session.refresh(friend_request)
    assert friend_request.status == FriendRequestStatus.PENDING.value


async def test_answer_unknown_request(db_session: AsyncSession):
    bob = await make_user(db_session, "bob")

    with pytest.raises(NotFoundError):
        await FriendshipService(db_session).accept_friend_request(uuid.uuid4(), bob.id)


async def test_unfriend_removes_both_sides(db_session: AsyncSession):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    references = ReferenceMaintainer(db_session)
    await references.befriend(alice.id, bob.id)
    await references.befriend(alice.id, carol.id)

    await references.unfriend(bob.id, alice.id)

    for user in (alice, bob, carol):
        await db_session.refresh(user)
    assert alice.friends == [str(carol.id)]
    assert bob.friends == []
    assert carol.friends == [str(alice.id)]

import pytest

from animetrack.notifications import create_notification, list_for, mark_all_read, unread_count
from animetrack.friends import send_request, accept_request, reject_request


@pytest.mark.asyncio
async def test_create_is_unread_and_listed_in_creation_order(make_user):
    a = await make_user('sender')
    b = await make_user()

    first = await create_notification(b.id, 'friend_request', from_user_id=a.id, message='hi')
    second = await create_notification(b.id, 'friend_request', message='system')

    inbox = await list_for(b.id)
    assert [n['id'] for n in inbox] == [first.id, second.id]
    assert inbox[0]['from'] == {'id': a.id, 'nickname': 'sender', 'avatar_url': ''}
    assert inbox[1]['from'] is None
    assert all(n['read'] is False for n in inbox)
    assert await unread_count(b.id) == 2


@pytest.mark.asyncio
async def test_unknown_type_is_rejected(make_user):
    b = await make_user()
    with pytest.raises(ValueError):
        await create_notification(b.id, 'party_invite')


@pytest.mark.asyncio
async def test_mark_all_read_only_touches_recipient(make_user):
    a = await make_user()
    b = await make_user()
    await create_notification(a.id, 'friend_request')
    await create_notification(b.id, 'friend_request')
    await create_notification(b.id, 'friend_request')

    assert await mark_all_read(b.id) == 2
    assert await mark_all_read(b.id) == 0

    assert await unread_count(b.id) == 0
    assert await unread_count(a.id) == 1
    assert [n['read'] for n in await list_for(b.id)] == [True, True]


@pytest.mark.asyncio
async def test_empty_inbox(make_user):
    a = await make_user()
    assert await list_for(a.id) == []
    assert await mark_all_read(a.id) == 0


@pytest.mark.asyncio
async def test_resolved_requests_are_listed_once(make_user):
    a = await make_user('alice')
    b = await make_user('bob')
    c = await make_user('carol')
    accepted = await send_request(a.id, c.id)
    rejected = await send_request(b.id, c.id)
    await accept_request(c.id, a.id)
    await reject_request(c.id, b.id)

    inbox = await list_for(c.id)

    assert [n['id'] for n in inbox] == [accepted.id, rejected.id]
    assert [n['resolution'] for n in inbox] == ['accepted', 'rejected']
    assert await unread_count(c.id) == 2

"""
Relationship Manager.

Friend lists are stored one row per side (see models.relations), so every
operation here changes two users' rows. Each operation runs in a single
transaction together with any notification it writes: either both sides and
the notification are committed, or nothing is.
"""
from .models import AsyncSessionLocal
from .models.relations import UserRelation, RelationKind
from .models.users import User
from .models.notifications import NotificationType
from .notifications import add_notification, resolve_friend_requests
from .errors import InvalidTarget, AlreadyFriends, AlreadyRequested, NoSuchRequest, UserNotFound
from .core import RELATION_EVENTS
from sqlalchemy import select, or_, and_
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)

FRIEND = RelationKind.FRIEND.value
REQUEST_SENT = RelationKind.REQUEST_SENT.value
REQUEST_RECEIVED = RelationKind.REQUEST_RECEIVED.value


async def _pair_rows(session, a: int, b: int):
    """Return (a's row about b, b's row about a); either may be None."""
    res = await session.execute(
        select(UserRelation).where(or_(
            and_(UserRelation.owner_id == a, UserRelation.other_id == b),
            and_(UserRelation.owner_id == b, UserRelation.other_id == a),
        ))
    )
    mine = theirs = None
    for row in res.scalars().all():
        if row.owner_id == a:
            mine = row
        else:
            theirs = row
    return mine, theirs


async def _write_side(session, owner_id: int, other_id: int, kind: str, row=None):
    # one row per (owner, other): changing lists means changing the row's kind
    if row is None:
        row = UserRelation(owner_id=owner_id, other_id=other_id, kind=kind)
        session.add(row)
    else:
        row.kind = kind
    await session.flush()
    return row


async def _drop_side(session, row):
    if row is not None:
        await session.delete(row)
        await session.flush()


async def send_request(requester_id: int, target_id: int):
    if requester_id == target_id:
        raise InvalidTarget()
    async with AsyncSessionLocal() as session:
        try:
            async with session.begin():
                res = await session.execute(select(User).where(User.id.in_((requester_id, target_id))))
                users = {u.id: u for u in res.scalars().all()}
                if target_id not in users or requester_id not in users:
                    raise UserNotFound()

                mine, theirs = await _pair_rows(session, requester_id, target_id)
                if FRIEND in (getattr(mine, 'kind', None), getattr(theirs, 'kind', None)):
                    raise AlreadyFriends()
                if theirs is not None and theirs.kind == REQUEST_RECEIVED:
                    raise AlreadyRequested()
                if mine is not None and mine.kind == REQUEST_RECEIVED:
                    raise AlreadyRequested('This user has already sent you a friend request')

                await _write_side(session, requester_id, target_id, REQUEST_SENT, mine)
                await _write_side(session, target_id, requester_id, REQUEST_RECEIVED, theirs)

                requester = users[requester_id]
                name = requester.nickname or requester.email
                notification = await add_notification(
                    session,
                    target_id,
                    NotificationType.FRIEND_REQUEST.value,
                    from_user_id=requester_id,
                    message=f'{name} wants to add you as a friend',
                )
        except IntegrityError:
            # a concurrent request for the same pair committed first
            raise AlreadyRequested()

    RELATION_EVENTS.labels(action='request').inc()
    logger.info({'msg': 'friend_request_sent', 'from': requester_id, 'to': target_id})
    return notification


async def _take_pending_request(session, accepter_id: int, requester_id: int):
    mine, theirs = await _pair_rows(session, accepter_id, requester_id)
    if mine is None or mine.kind != REQUEST_RECEIVED:
        raise NoSuchRequest()
    return mine, theirs


async def accept_request(accepter_id: int, requester_id: int):
    async with AsyncSessionLocal() as session:
        async with session.begin():
            mine, theirs = await _take_pending_request(session, accepter_id, requester_id)
            await _write_side(session, accepter_id, requester_id, FRIEND, mine)
            await _write_side(session, requester_id, accepter_id, FRIEND, theirs)
            await resolve_friend_requests(session, accepter_id, requester_id, 'accepted')

    RELATION_EVENTS.labels(action='accept').inc()
    logger.info({'msg': 'friend_request_accepted', 'from': requester_id, 'to': accepter_id})


async def reject_request(accepter_id: int, requester_id: int):
    async with AsyncSessionLocal() as session:
        async with session.begin():
            mine, theirs = await _take_pending_request(session, accepter_id, requester_id)
            await _drop_side(session, mine)
            if theirs is not None and theirs.kind == REQUEST_SENT:
                await _drop_side(session, theirs)
            await resolve_friend_requests(session, accepter_id, requester_id, 'rejected')

    RELATION_EVENTS.labels(action='reject').inc()
    logger.info({'msg': 'friend_request_rejected', 'from': requester_id, 'to': accepter_id})


async def remove_friend(user_id: int, friend_id: int) -> bool:
    """Unfriend both ways. Returns False when there was nothing to remove."""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            mine, theirs = await _pair_rows(session, user_id, friend_id)
            removed = False
            for row in (mine, theirs):
                if row is not None and row.kind == FRIEND:
                    await _drop_side(session, row)
                    removed = True

    if removed:
        RELATION_EVENTS.labels(action='remove').inc()
        logger.info({'msg': 'friend_removed', 'user': user_id, 'friend': friend_id})
    return removed


async def relation_lists(user_id: int) -> dict:
    """The user's friends / sent / received id lists."""
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(UserRelation.other_id, UserRelation.kind)
            .where(UserRelation.owner_id == user_id)
            .order_by(UserRelation.id)
        )
        lists = {FRIEND: [], REQUEST_SENT: [], REQUEST_RECEIVED: []}
        for other_id, kind in res.all():
            lists[kind].append(other_id)
    return {
        'friends': lists[FRIEND],
        'friend_requests_sent': lists[REQUEST_SENT],
        'friend_requests_received': lists[REQUEST_RECEIVED],
    }


async def list_friends(user_id: int):
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(User)
            .join(UserRelation, UserRelation.other_id == User.id)
            .where(UserRelation.owner_id == user_id, UserRelation.kind == FRIEND)
            .order_by(User.id)
        )
        return res.scalars().all()


async def relation_state(viewer_id: int, other_id: int) -> str:
    """How `other_id` looks from `viewer_id`: self, friends, request_sent, request_received or none."""
    if viewer_id == other_id:
        return 'self'
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(UserRelation.kind)
            .where(UserRelation.owner_id == viewer_id, UserRelation.other_id == other_id)
        )
        kind = res.scalars().first()
    if kind == FRIEND:
        return 'friends'
    return kind or 'none'

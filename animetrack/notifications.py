"""
Notification Store.
Notifications are created inside the caller's session so they commit (or roll
back) together with the relationship change that produced them.
"""
from .models import AsyncSessionLocal
from .models.notifications import Notification, NotificationType
from .models.users import User
from sqlalchemy import select, update, func
import logging

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {t.value for t in NotificationType}
RESOLUTIONS = ('accepted', 'rejected')

async def add_notification(session, recipient_id: int, notification_type: str, from_user_id: int = None, message: str = None):
    if notification_type not in NOTIFICATION_TYPES:
        raise ValueError(f'unknown notification type: {notification_type}')
    n = Notification(user_id=recipient_id, type=notification_type, from_user_id=from_user_id, message=message, read=False)
    session.add(n)
    await session.flush()
    await session.refresh(n)
    return n

async def create_notification(recipient_id: int, notification_type: str, from_user_id: int = None, message: str = None):
    async with AsyncSessionLocal() as session:
        n = await add_notification(session, recipient_id, notification_type, from_user_id, message)
        await session.commit()
        return n

async def list_for(recipient_id: int):
    """Notifications for a recipient, oldest first, with the actor attached.

    Each row is one notification (ids are the primary key), so a request that
    was resolved shows up once with its resolution instead of twice."""
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(Notification)
            .where(Notification.user_id == recipient_id)
            .order_by(Notification.created_at.asc(), Notification.id.asc())
        )
        rows = res.scalars().all()
        actor_ids = {n.from_user_id for n in rows if n.from_user_id is not None}
        actors = {}
        if actor_ids:
            ures = await session.execute(select(User).where(User.id.in_(actor_ids)))
            actors = {u.id: u for u in ures.scalars().all()}

    items = []
    for n in rows:
        actor = actors.get(n.from_user_id)
        items.append({
            'id': n.id,
            'type': n.type,
            'read': n.read,
            'message': n.message,
            'resolution': n.resolution,
            'created_at': n.created_at,
            'from': {'id': actor.id, 'nickname': actor.nickname, 'avatar_url': actor.avatar_url} if actor else None,
        })
    return items

async def mark_all_read(recipient_id: int) -> int:
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            update(Notification)
            .where(Notification.user_id == recipient_id, Notification.read.is_(False))
            .values(read=True)
        )
        await session.commit()
        logger.info({'msg': 'notifications_read', 'user_id': recipient_id, 'count': res.rowcount})
        return res.rowcount

async def unread_count(recipient_id: int) -> int:
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(func.count(Notification.id))
            .where(Notification.user_id == recipient_id, Notification.read.is_(False))
        )
        return res.scalar_one()

async def resolve_friend_requests(session, recipient_id: int, actor_id: int, resolution: str) -> int:
    """Record the outcome on pending friend_request notifications; the read flag is left alone."""
    if resolution not in RESOLUTIONS:
        raise ValueError(f'unknown resolution: {resolution}')
    res = await session.execute(
        update(Notification)
        .where(
            Notification.user_id == recipient_id,
            Notification.from_user_id == actor_id,
            Notification.type == NotificationType.FRIEND_REQUEST.value,
            Notification.resolution.is_(None),
        )
        .values(resolution=resolution)
    )
    return res.rowcount

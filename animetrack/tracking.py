"""
List Tracking Service: a user's per-title status list and episode watch history.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from .models import AsyncSessionLocal
from .models.anime_entries import AnimeEntry
from .models.watch_history import WatchEvent
from .statuses import STATUS_KEYS, Unrecognized, normalize_status
from .errors import InvalidStatus
from sqlalchemy import select, delete, or_, func
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)


def _title_filter(title_id: str):
    return or_(AnimeEntry.shikimori_id == title_id, AnimeEntry.mal_id == title_id)


def _apply_metadata(entry: AnimeEntry, metadata: dict):
    # animeData from the client uses image_url/episodes; stored entries use poster_url/episodes_total
    title = metadata.get('title')
    poster = metadata.get('poster_url') or metadata.get('image_url')
    episodes = metadata.get('episodes_total', metadata.get('episodes'))
    if title:
        entry.title = title
    if poster:
        entry.poster_url = poster
    if episodes is not None:
        entry.episodes_total = int(episodes)


def entry_to_dict(entry: AnimeEntry) -> dict:
    return {
        'shikimori_id': entry.shikimori_id,
        'mal_id': entry.mal_id or entry.shikimori_id,
        'title': entry.title,
        'poster_url': entry.poster_url,
        'episodes_total': entry.episodes_total,
        'status': entry.status,
        'last_watched_at': entry.last_watched_at,
        'added_at': entry.created_at,
        'updated_at': entry.updated_at,
    }


async def upsert(user_id: int, title_id, status, metadata: dict = None, mal_id=None):
    """Set the status of a title on the user's list, creating the entry if needed."""
    result = normalize_status(status)
    if isinstance(result, Unrecognized):
        raise InvalidStatus(result.raw_value)
    title_id = str(title_id)
    mal_id = str(mal_id) if mal_id is not None else None
    metadata = metadata or {}

    for attempt in range(2):
        async with AsyncSessionLocal() as session:
            q = await session.execute(
                select(AnimeEntry).where(AnimeEntry.user_id == user_id, _title_filter(title_id))
            )
            entry = q.scalars().first()
            if entry is None:
                entry = AnimeEntry(user_id=user_id, shikimori_id=title_id, mal_id=mal_id or title_id)
                session.add(entry)
            entry.status = result.key
            _apply_metadata(entry, metadata)
            try:
                await session.commit()
            except IntegrityError:
                # a concurrent request created the entry first; update it instead
                await session.rollback()
                if attempt:
                    raise
                continue
            await session.refresh(entry)
            logger.info({'msg': 'list_upsert', 'user_id': user_id, 'title': title_id, 'status': result.key})
            return entry


async def remove(user_id: int, title_id) -> bool:
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            delete(AnimeEntry).where(AnimeEntry.user_id == user_id, _title_filter(str(title_id)))
        )
        await session.commit()
        return res.rowcount > 0


async def get_list(user_id: int):
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(AnimeEntry).where(AnimeEntry.user_id == user_id).order_by(AnimeEntry.id)
        )
        return res.scalars().all()


async def log_episode_watched(user_id: int, mal_id, episode: int, shikimori_id=None, title: str = None, watched_at: datetime = None):
    """Append a watch event. Re-watching the same episode adds another event."""
    mal_id = str(mal_id)
    shikimori_id = str(shikimori_id) if shikimori_id is not None else mal_id
    async with AsyncSessionLocal() as session:
        event = WatchEvent(user_id=user_id, mal_id=mal_id, shikimori_id=shikimori_id, title=title, episode=episode)
        if watched_at is not None:
            event.watched_at = watched_at
        session.add(event)
        await session.flush()
        await session.refresh(event)

        q = await session.execute(
            select(AnimeEntry).where(
                AnimeEntry.user_id == user_id,
                or_(_title_filter(mal_id), _title_filter(shikimori_id)),
            )
        )
        entry = q.scalars().first()
        if entry is not None:
            entry.last_watched_at = event.watched_at
        await session.commit()
        return event


async def stats(user_id: int) -> dict:
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(AnimeEntry.status, func.count(AnimeEntry.id))
            .where(AnimeEntry.user_id == user_id)
            .group_by(AnimeEntry.status)
        )
        counts = dict(res.all())
    out = {key: counts.get(key, 0) for key in STATUS_KEYS}
    out['total'] = sum(counts.values())
    return out


async def detailed_stats(user_id: int) -> dict:
    grouped = {key: [] for key in STATUS_KEYS}
    for entry in await get_list(user_id):
        grouped.setdefault(entry.status, []).append(entry_to_dict(entry))
    return grouped


async def recent(user_id: int, limit: int = 10):
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(WatchEvent)
            .where(WatchEvent.user_id == user_id)
            .order_by(WatchEvent.watched_at.desc(), WatchEvent.id.desc())
            .limit(limit)
        )
        return res.scalars().all()


async def activity(user_id: int, days: int = 365, now: datetime = None):
    """Watch events per calendar day over the last `days` days, oldest first."""
    now = now or datetime.now(timezone.utc)
    since = (now - timedelta(days=days)).replace(tzinfo=None)
    async with AsyncSessionLocal() as session:
        res = await session.execute(
            select(WatchEvent.watched_at).where(WatchEvent.user_id == user_id)
        )
        stamps = res.scalars().all()
    per_day = Counter(
        ts.date().isoformat() for ts in stamps
        if ts is not None and ts.replace(tzinfo=None) >= since
    )
    return [{'date': day, 'count': per_day[day]} for day in sorted(per_day)]

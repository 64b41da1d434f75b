from datetime import datetime, timedelta

import pytest

from animetrack.tracking import (
    upsert,
    remove,
    get_list,
    log_episode_watched,
    stats,
    detailed_stats,
    recent,
    activity,
)
from animetrack.errors import InvalidStatus


@pytest.mark.asyncio
async def test_upsert_normalizes_and_updates_in_place(make_user):
    user = await make_user()

    entry = await upsert(user.id, '5114', 'Смотрю', {'title': 'Fullmetal Alchemist: Brotherhood', 'episodes': 64})
    assert entry.status == 'watching'
    assert entry.episodes_total == 64
    assert len(await get_list(user.id)) == 1

    entry = await upsert(user.id, '5114', 'watching', {'image_url': 'https://img/fma.jpg'})
    entries = await get_list(user.id)
    assert len(entries) == 1
    assert entries[0].status == 'watching'
    assert entries[0].poster_url == 'https://img/fma.jpg'
    assert entries[0].title == 'Fullmetal Alchemist: Brotherhood'

    await upsert(user.id, 5114, 'Completed')
    entries = await get_list(user.id)
    assert len(entries) == 1
    assert entries[0].status == 'completed'


@pytest.mark.asyncio
async def test_upsert_rejects_unknown_status(make_user):
    user = await make_user()
    with pytest.raises(InvalidStatus) as err:
        await upsert(user.id, '1', 'on hold')
    assert err.value.raw_value == 'on hold'
    assert await get_list(user.id) == []


@pytest.mark.asyncio
async def test_entries_are_per_user(make_user):
    a = await make_user()
    b = await make_user()
    await upsert(a.id, '1', 'planned')
    await upsert(b.id, '1', 'dropped')
    assert [e.status for e in await get_list(a.id)] == ['planned']
    assert [e.status for e in await get_list(b.id)] == ['dropped']


@pytest.mark.asyncio
async def test_remove_missing_entry_is_noop(make_user):
    user = await make_user()
    await upsert(user.id, '21', 'planned')

    assert await remove(user.id, '5114') is False
    assert len(await get_list(user.id)) == 1

    assert await remove(user.id, '21') is True
    assert await get_list(user.id) == []


@pytest.mark.asyncio
async def test_remove_matches_mal_id(make_user):
    user = await make_user()
    await upsert(user.id, '100', 'watching', mal_id='200')
    assert await remove(user.id, '200') is True
    assert await get_list(user.id) == []


@pytest.mark.asyncio
async def test_watch_history_keeps_duplicates(make_user):
    user = await make_user()
    await upsert(user.id, '5114', 'watching')

    await log_episode_watched(user.id, '5114', 3, title='FMA')
    await log_episode_watched(user.id, '5114', 3, title='FMA')
    await log_episode_watched(user.id, '5114', 4, title='FMA')

    events = await recent(user.id, limit=10)
    assert len(events) == 3
    assert sorted(e.episode for e in events) == [3, 3, 4]
    assert (await get_list(user.id))[0].last_watched_at is not None

    assert len(await recent(user.id, limit=2)) == 2


@pytest.mark.asyncio
async def test_history_without_list_entry(make_user):
    user = await make_user()
    event = await log_episode_watched(user.id, 99, 1)
    assert event.mal_id == '99'
    assert event.shikimori_id == '99'
    assert await get_list(user.id) == []


@pytest.mark.asyncio
async def test_stats_and_detailed_stats(make_user):
    user = await make_user()
    await upsert(user.id, '1', 'watching')
    await upsert(user.id, '2', 'watching')
    await upsert(user.id, '3', 'В планах')
    await upsert(user.id, '4', 'dropped')

    assert await stats(user.id) == {'watching': 2, 'planned': 1, 'completed': 0, 'dropped': 1, 'total': 4}

    grouped = await detailed_stats(user.id)
    assert set(grouped) == {'watching', 'planned', 'completed', 'dropped'}
    assert [e['shikimori_id'] for e in grouped['watching']] == ['1', '2']
    assert grouped['completed'] == []


@pytest.mark.asyncio
async def test_activity_counts_per_day(make_user):
    user = await make_user()
    now = datetime(2026, 3, 10, 12, 0, 0)
    await log_episode_watched(user.id, '1', 1, watched_at=now - timedelta(days=1))
    await log_episode_watched(user.id, '1', 2, watched_at=now - timedelta(days=1, hours=2))
    await log_episode_watched(user.id, '1', 3, watched_at=now)
    await log_episode_watched(user.id, '1', 4, watched_at=now - timedelta(days=400))

    assert await activity(user.id, days=365, now=now) == [
        {'date': '2026-03-09', 'count': 2},
        {'date': '2026-03-10', 'count': 1},
    ]

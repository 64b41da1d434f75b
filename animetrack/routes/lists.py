from fastapi import APIRouter, Depends, HTTPException
from typing import List
from ..schemas.lists import ListUpsertIn, AnimeEntryOut, WatchEventIn, WatchEventOut
from ..schemas.users import ActionOkOut
from ..tracking import upsert, remove, get_list, entry_to_dict, log_episode_watched, recent
from ..enrichment import ListEnricher, ENRICH_DEADLINE
from ..catalog import CatalogGateway, get_catalog
from ..auth import get_current_user

router = APIRouter()
history_router = APIRouter()


@router.get('')
async def my_list(
    details: bool = False,
    current_user: dict = Depends(get_current_user),
    catalog: CatalogGateway = Depends(get_catalog),
):
    entries = [entry_to_dict(e) for e in await get_list(current_user['id'])]
    if not details:
        return entries
    # the enrichment run ends with the request, including when the client goes away
    async with ListEnricher(catalog.get_anime) as enricher:
        await enricher.start(entries)
        # items still pending at the deadline come back without details
        await enricher.wait(timeout=ENRICH_DEADLINE)
        return enricher.merged(entries)


def _clean_id(value):
    value = str(value).strip() if value is not None else ''
    return value or None


@router.post('', response_model=AnimeEntryOut)
async def update_list(payload: ListUpsertIn, current_user: dict = Depends(get_current_user)):
    # the client may send an empty shikimori_id next to a valid mal_id
    mal_id = _clean_id(payload.mal_id)
    title_id = _clean_id(payload.shikimori_id) or mal_id
    if title_id is None:
        raise HTTPException(400, 'mal_id or shikimori_id is required')
    return await upsert(
        current_user['id'],
        title_id,
        payload.status,
        payload.animeData.model_dump(exclude_none=True) if payload.animeData else None,
        mal_id=mal_id,
    )


@router.delete('/{title_id}', response_model=ActionOkOut)
async def delete_from_list(title_id: str, current_user: dict = Depends(get_current_user)):
    removed = await remove(current_user['id'], title_id)
    return {'ok': True, 'message': 'Removed from list' if removed else 'Not in list'}


@history_router.post('', response_model=WatchEventOut)
async def episode_watched(payload: WatchEventIn, current_user: dict = Depends(get_current_user)):
    return await log_episode_watched(
        current_user['id'],
        payload.mal_id,
        payload.episode,
        shikimori_id=payload.shikimori_id,
        title=payload.title,
    )


@history_router.get('', response_model=List[WatchEventOut])
async def my_history(limit: int = 50, current_user: dict = Depends(get_current_user)):
    return await recent(current_user['id'], limit=min(max(limit, 1), 500))

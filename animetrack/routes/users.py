from fastapi import APIRouter, Depends, HTTPException, File, UploadFile
from typing import List, Optional
from ..schemas.users import MeOut, ProfileOut, ProfileUpdateIn, UserBrief, ImageUploadOut, ActionOkOut
from ..schemas.friendships import FriendRequestOut, RelationOut
from ..schemas.lists import StatsOut, WatchEventOut, ActivityDayOut
from ..crud import require_user, update_profile, set_image_url
from ..friends import (
    send_request,
    accept_request,
    reject_request,
    remove_friend,
    list_friends,
    relation_lists,
    relation_state,
)
from ..tracking import stats, detailed_stats, recent, activity
from ..file_storage import FileStorageManager, get_file_storage
from ..cache import check_rate_limit
from ..auth import get_current_user, get_optional_user

router = APIRouter()


# ==================== OWN PROFILE ====================

@router.get('/me', response_model=MeOut)
async def me(current_user: dict = Depends(get_current_user)):
    return await require_user(current_user['id'])


@router.put('/me', response_model=MeOut)
async def update_me(payload: ProfileUpdateIn, current_user: dict = Depends(get_current_user)):
    changes = payload.model_dump(exclude_unset=True)
    if 'nickname' in changes:
        nickname = (changes['nickname'] or '').strip()
        if not nickname:
            raise HTTPException(400, 'Nickname cannot be empty')
        changes['nickname'] = nickname
    if 'bio' in changes:
        changes['bio'] = (changes['bio'] or '').strip()
    if 'social_links' in changes:
        links = changes['social_links'] or {}
        changes['social_links'] = {k: v.strip() for k, v in links.items() if v and v.strip()}
    return await update_profile(current_user['id'], changes)


async def _replace_image(user_id: int, file: UploadFile, kind: str, storage: FileStorageManager):
    url = await storage.save_image(user_id, file, kind)
    _, old_url = await set_image_url(user_id, f'{kind}_url', url)
    if old_url and old_url != url:
        storage.delete_image(old_url)
    return ImageUploadOut(url=url, message=f'{kind.capitalize()} updated successfully')


@router.post('/me/avatar', response_model=ImageUploadOut)
async def upload_avatar(
    avatar: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    storage: FileStorageManager = Depends(get_file_storage),
):
    return await _replace_image(current_user['id'], avatar, 'avatar', storage)


@router.post('/me/cover', response_model=ImageUploadOut)
async def upload_cover(
    cover: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    storage: FileStorageManager = Depends(get_file_storage),
):
    return await _replace_image(current_user['id'], cover, 'cover', storage)


# ==================== FRIENDS ====================

@router.post('/{user_id}/request-friend', response_model=FriendRequestOut)
async def request_friend(user_id: int, current_user: dict = Depends(get_current_user)):
    # max 20 friend requests per hour
    if not await check_rate_limit(current_user['id'], 'friend_request', limit=20, window=3600):
        raise HTTPException(429, 'Rate limit exceeded. Too many friend requests.')
    notification = await send_request(current_user['id'], user_id)
    return {'ok': True, 'notification_id': notification.id, 'message': 'Friend request sent'}


@router.post('/{user_id}/accept-friend', response_model=ActionOkOut)
async def accept_friend(user_id: int, current_user: dict = Depends(get_current_user)):
    await accept_request(current_user['id'], user_id)
    return {'ok': True, 'message': 'Friend request accepted'}


@router.post('/{user_id}/reject-friend', response_model=ActionOkOut)
async def reject_friend(user_id: int, current_user: dict = Depends(get_current_user)):
    await reject_request(current_user['id'], user_id)
    return {'ok': True, 'message': 'Friend request rejected'}


@router.delete('/{user_id}/friend', response_model=ActionOkOut)
async def unfriend(user_id: int, current_user: dict = Depends(get_current_user)):
    removed = await remove_friend(current_user['id'], user_id)
    return {'ok': True, 'message': 'Friend removed' if removed else 'Not friends'}


@router.get('/{user_id}/relation', response_model=RelationOut)
async def relation(user_id: int, current_user: dict = Depends(get_current_user)):
    await require_user(user_id)
    return {'user_id': user_id, 'relation': await relation_state(current_user['id'], user_id)}


@router.get('/{user_id}/friends', response_model=List[UserBrief])
async def friends_of(user_id: int):
    await require_user(user_id)
    return await list_friends(user_id)


# ==================== PUBLIC PROFILE ====================

@router.get('/{user_id}', response_model=ProfileOut)
async def profile(user_id: int, viewer: Optional[dict] = Depends(get_optional_user)):
    user = await require_user(user_id)
    out = ProfileOut.model_validate(user).model_dump()
    out['friends'] = [UserBrief.model_validate(f).model_dump() for f in await list_friends(user_id)]
    if viewer is not None:
        out['relation'] = await relation_state(viewer['id'], user_id)
        if viewer['id'] == user_id:
            lists = await relation_lists(user_id)
            out['friend_requests_sent'] = lists['friend_requests_sent']
            out['friend_requests_received'] = lists['friend_requests_received']
    return out


@router.get('/{user_id}/stats', response_model=StatsOut)
async def user_stats(user_id: int):
    await require_user(user_id)
    return await stats(user_id)


@router.get('/{user_id}/detailed-stats')
async def user_detailed_stats(user_id: int):
    await require_user(user_id)
    return await detailed_stats(user_id)


@router.get('/{user_id}/recent', response_model=List[WatchEventOut])
async def user_recent(user_id: int, limit: int = 10):
    await require_user(user_id)
    return await recent(user_id, limit=min(max(limit, 1), 100))


@router.get('/{user_id}/activity', response_model=List[ActivityDayOut])
async def user_activity(user_id: int, days: int = 365):
    await require_user(user_id)
    return await activity(user_id, days=min(max(days, 1), 366))

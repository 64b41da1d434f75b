from fastapi import APIRouter, Depends
from typing import List
from ..schemas.notifications import NotificationOut, MarkReadOut, UnreadCountOut
from ..notifications import list_for, mark_all_read, unread_count
from ..auth import get_current_user

router = APIRouter()

@router.get('', response_model=List[NotificationOut])
async def my_notifications(current_user: dict = Depends(get_current_user)):
    return await list_for(current_user['id'])

@router.post('/read', response_model=MarkReadOut)
async def read_all(current_user: dict = Depends(get_current_user)):
    updated = await mark_all_read(current_user['id'])
    return {'ok': True, 'updated': updated}

@router.get('/unread-count', response_model=UnreadCountOut)
async def my_unread_count(current_user: dict = Depends(get_current_user)):
    return {'unread': await unread_count(current_user['id'])}

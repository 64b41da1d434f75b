from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from .users import UserBrief

class NotificationOut(BaseModel):
    id: int
    type: str
    read: bool
    message: Optional[str] = None
    resolution: Optional[str] = None
    created_at: Optional[datetime] = None
    from_user: Optional[UserBrief] = Field(None, alias='from')

    class Config:
        populate_by_name = True

class MarkReadOut(BaseModel):
    ok: bool = True
    updated: int

class UnreadCountOut(BaseModel):
    unread: int

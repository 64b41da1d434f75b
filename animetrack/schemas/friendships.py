from pydantic import BaseModel
from typing import Optional

class FriendRequestOut(BaseModel):
    ok: bool = True
    notification_id: int
    message: Optional[str] = None

class RelationOut(BaseModel):
    user_id: int
    relation: str

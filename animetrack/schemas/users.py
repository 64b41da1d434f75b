from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    nickname: Optional[str] = Field(None, max_length=30)

class TokenOut(BaseModel):
    access_token: str
    token_type: str = 'bearer'

class SocialLinks(BaseModel):
    website: Optional[str] = None
    telegram: Optional[str] = None
    twitter: Optional[str] = None
    vk: Optional[str] = None
    discord: Optional[str] = None

class UserBrief(BaseModel):
    id: int
    nickname: str
    avatar_url: str = ''

    class Config:
        from_attributes = True

class UserOut(BaseModel):
    id: int
    nickname: str
    avatar_url: str = ''
    cover_url: str = ''
    bio: str = ''
    social_links: SocialLinks = SocialLinks()
    sticker: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MeOut(UserOut):
    email: EmailStr

class ProfileOut(UserOut):
    friends: List[UserBrief] = []
    # self, friends, request_sent, request_received, none; None for anonymous viewers
    relation: Optional[str] = None
    friend_requests_sent: Optional[List[int]] = None
    friend_requests_received: Optional[List[int]] = None

class ProfileUpdateIn(BaseModel):
    nickname: Optional[str] = Field(None, max_length=30)
    bio: Optional[str] = Field(None, max_length=200)
    social_links: Optional[SocialLinks] = None
    sticker: Optional[str] = Field(None, max_length=100)

class ImageUploadOut(BaseModel):
    url: str
    message: str

class ActionOkOut(BaseModel):
    ok: bool = True
    message: Optional[str] = None

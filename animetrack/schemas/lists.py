from pydantic import BaseModel, Field
from typing import Optional, Union
from datetime import datetime

class AnimeMetadataIn(BaseModel):
    # the client sends the whole catalog record; only these keys are kept
    title: Optional[str] = None
    image_url: Optional[str] = None
    poster_url: Optional[str] = None
    episodes: Optional[int] = Field(None, ge=0)
    episodes_total: Optional[int] = Field(None, ge=0)

class ListUpsertIn(BaseModel):
    mal_id: Optional[Union[int, str]] = None
    shikimori_id: Optional[Union[int, str]] = None
    status: str
    animeData: Optional[AnimeMetadataIn] = None

class AnimeEntryOut(BaseModel):
    shikimori_id: str
    mal_id: Optional[str] = None
    title: Optional[str] = None
    poster_url: Optional[str] = None
    episodes_total: Optional[int] = None
    status: str
    last_watched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class WatchEventIn(BaseModel):
    mal_id: Union[int, str]
    shikimori_id: Optional[Union[int, str]] = None
    title: Optional[str] = None
    episode: int = Field(..., ge=1)

class WatchEventOut(BaseModel):
    mal_id: str
    shikimori_id: Optional[str] = None
    title: Optional[str] = None
    episode: int
    watched_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StatsOut(BaseModel):
    total: int
    watching: int
    planned: int
    completed: int
    dropped: int

class ActivityDayOut(BaseModel):
    date: str
    count: int

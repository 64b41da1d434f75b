from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from . import Base

class AnimeEntry(Base):
    __tablename__ = 'anime_entries'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    shikimori_id = Column(String(32), nullable=False)
    mal_id = Column(String(32), nullable=True)
    title = Column(String, nullable=True)
    poster_url = Column(String, nullable=True)
    episodes_total = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False)  # watching, completed, dropped, planned
    last_watched_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    __table_args__ = (
        UniqueConstraint('user_id', 'shikimori_id', name='uix_user_title'),
    )

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from . import Base

class WatchEvent(Base):
    # append-only; re-watches are logged as new rows
    __tablename__ = 'watch_history'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    mal_id = Column(String(32), nullable=False)
    shikimori_id = Column(String(32), nullable=True)
    title = Column(String, nullable=True)
    episode = Column(Integer, nullable=False)
    watched_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

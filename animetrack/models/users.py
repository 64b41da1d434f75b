from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, func
from . import Base

class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    nickname = Column(String(30), nullable=False, default='')
    avatar_url = Column(String, nullable=False, default='')
    cover_url = Column(String, nullable=False, default='')
    bio = Column(Text, nullable=False, default='')
    social_links = Column(JSON, nullable=False, default=dict)
    sticker = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, func
from . import Base

class NotificationType(str, enum.Enum):
    FRIEND_REQUEST = 'friend_request'

class Notification(Base):
    __tablename__ = 'notifications'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    type = Column(String(50), nullable=False)
    from_user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    message = Column(Text, nullable=True)
    resolution = Column(String(20), nullable=True)  # accepted, rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

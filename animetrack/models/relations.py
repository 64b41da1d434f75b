import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from . import Base

class RelationKind(str, enum.Enum):
    FRIEND = 'friend'
    REQUEST_SENT = 'request_sent'
    REQUEST_RECEIVED = 'request_received'

class UserRelation(Base):
    """One side of a relationship between two users.

    A pending request is two rows (``request_sent`` on the requester,
    ``request_received`` on the target) and a friendship is two ``friend``
    rows, so every relationship change touches both users.
    """
    __tablename__ = 'user_relations'
    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    other_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    kind = Column(String(20), nullable=False)  # friend, request_sent, request_received
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    __table_args__ = (
        UniqueConstraint('owner_id', 'other_id', name='uix_relation_pair'),
        CheckConstraint('owner_id <> other_id', name='ck_relation_not_self'),
    )

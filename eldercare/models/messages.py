from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, Index
from . import Base, utcnow

class Message(Base):
    __tablename__ = 'messages'
    id = Column(Integer, primary_key=True)
    sender_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    receiver_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    # naive UTC, assigned by the server at insert
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        Index('ix_messages_pair_timestamp', 'sender_id', 'receiver_id', 'timestamp'),
        Index('ix_messages_receiver_unread', 'receiver_id', 'is_read'),
    )

from typing import Optional
from . import CamelModel, UtcDatetime

class MessageIn(CamelModel):
    receiver_id: int
    content: str

class MessageOut(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    is_read: bool
    timestamp: UtcDatetime

class CounterpartOut(CamelModel):
    id: int
    full_name: str
    user_type: str

class LastMessageOut(CamelModel):
    content: str
    timestamp: UtcDatetime
    is_read: bool
    sender_id: Optional[int] = None

class ConversationOut(CamelModel):
    user: CounterpartOut
    last_message: LastMessageOut
    unread_count: int

import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List
from ..schemas import StatusOut
from ..schemas.messages import MessageIn, MessageOut, ConversationOut
from ..crud import (
    send_message,
    list_dialog,
    list_conversations,
    mark_thread_read,
    mark_thread_delivered,
    get_user_by_id,
)
from ..core import MESSAGES_SENT, MESSAGES_MARKED_READ
from ..auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/conversations', response_model=List[ConversationOut])
async def conversations(current_user: dict = Depends(get_current_user)):
    try:
        return await list_conversations(current_user['id'])
    except Exception as e:
        logger.error(f"Error in conversations route: {e}")
        raise HTTPException(500, f"Error fetching conversations: {str(e)}")


@router.get('/messages/{user_id}', response_model=List[MessageOut])
async def dialog(user_id: int, current_user: dict = Depends(get_current_user)):
    """Transcript with `user_id`, oldest first. Opening it marks incoming messages read."""
    try:
        messages, marked = await list_dialog(current_user['id'], user_id)
    except Exception as e:
        logger.error(f"Error fetching messages: {e}")
        raise HTTPException(500, f"Error fetching messages: {str(e)}")
    if marked:
        MESSAGES_MARKED_READ.labels(trigger='thread').inc(marked)
    return messages


@router.post('/messages', response_model=MessageOut, status_code=201)
async def send(payload: MessageIn, current_user: dict = Depends(get_current_user)):
    content = payload.content.strip()
    if not content:
        raise HTTPException(400, 'Message content cannot be empty')

    try:
        receiver = await get_user_by_id(payload.receiver_id)
        if not receiver:
            raise HTTPException(404, 'Receiver not found')
        m = await send_message(current_user['id'], payload.receiver_id, content)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error sending message: {e}")
        raise HTTPException(500, f"Error sending message: {str(e)}")

    MESSAGES_SENT.inc()
    return m


@router.put('/messages/deliver/{sender_id}', response_model=StatusOut)
async def mark_delivered(sender_id: int, current_user: dict = Depends(get_current_user)):
    try:
        marked = await mark_thread_delivered(current_user['id'], sender_id)
    except Exception as e:
        logger.error(f"Error updating message status: {e}")
        raise HTTPException(500, f"Error updating message status: {str(e)}")
    MESSAGES_MARKED_READ.labels(trigger='deliver').inc(marked)
    return {'message': 'Messages marked as delivered'}


@router.put('/messages/read/{sender_id}', response_model=StatusOut)
async def mark_read(sender_id: int, current_user: dict = Depends(get_current_user)):
    try:
        marked = await mark_thread_read(current_user['id'], sender_id)
    except Exception as e:
        logger.error(f"Error updating message status: {e}")
        raise HTTPException(500, f"Error updating message status: {str(e)}")
    MESSAGES_MARKED_READ.labels(trigger='read').inc(marked)
    return {'message': 'Messages marked as read'}

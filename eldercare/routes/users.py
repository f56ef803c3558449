import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from ..schemas.users import RegisterIn, LoginIn, TokenOut, UserOut
from ..crud import create_user, authenticate_user, get_user_by_id, list_chat_contacts
from ..auth import create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/register', response_model=UserOut, status_code=201)
async def register(payload: RegisterIn):
    user = await create_user(payload)
    if not user:
        raise HTTPException(400, 'User already exists')
    logger.info(f"Registered user {user.id} as {user.user_type}")
    return user


@router.post('/login', response_model=TokenOut)
async def login(payload: LoginIn):
    user = await authenticate_user(payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail='Invalid email or password')
    if user.is_archived:
        raise HTTPException(status_code=401, detail='This account has been archived')
    token = create_access_token({'id': user.id, 'userType': user.user_type})
    return {'access_token': token, 'token_type': 'bearer', 'user': user}


@router.get('/me', response_model=UserOut)
async def me(current_user: dict = Depends(get_current_user)):
    user = await get_user_by_id(current_user['id'])
    if not user:
        raise HTTPException(404, 'User not found')
    return user


@router.get('/contacts', response_model=List[UserOut])
async def contacts(user_type: Optional[str] = Query(None, alias='userType'), current_user: dict = Depends(get_current_user)):
    """Users the viewer can start a conversation with, optionally filtered by role."""
    return await list_chat_contacts(current_user['id'], user_type)

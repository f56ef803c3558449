import os
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext

# Prefer JWT_SECRET but support legacy JWT_SECRET_KEY for compatibility
SECRET = os.getenv('JWT_SECRET') or os.getenv('JWT_SECRET_KEY', 'devsecret')
ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', str(60 * 24 * 30)))

BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '12'))

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=BCRYPT_ROUNDS)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl='/api/users/login', auto_error=False)

def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return pwd_ctx.verify(password, hashed)

def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({'exp': expire})
    encoded = jwt.encode(to_encode, SECRET, algorithm=ALGORITHM)
    return encoded

def decode_token(token: str):
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None

async def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    """Resolve the bearer token to the acting viewer.

    Archived accounts are rejected the same way as unknown ones.
    """
    # imported here, crud depends on this module for hashing
    from .crud import get_user_by_id

    payload = decode_token(token) if token else None
    if not payload or 'id' not in payload:
        raise HTTPException(status_code=401, detail='Not authorized, token failed',
                            headers={'WWW-Authenticate': 'Bearer'})
    user = await get_user_by_id(payload['id'])
    if not user or user.is_archived:
        raise HTTPException(status_code=401, detail='Not authorized, user not found',
                            headers={'WWW-Authenticate': 'Bearer'})
    return {
        'id': user.id,
        'full_name': user.full_name,
        'email': user.email,
        'user_type': user.user_type,
    }

from typing import Literal, Optional
from pydantic import EmailStr
from . import CamelModel, UtcDatetime

UserType = Literal['admin', 'owner', 'nutritionist', 'relative', 'nurse']

class RegisterIn(CamelModel):
    full_name: str
    email: EmailStr
    password: str
    user_type: UserType
    phone: str = ''
    location: str = ''

class LoginIn(CamelModel):
    email: EmailStr
    password: str

class UserOut(CamelModel):
    id: int
    full_name: str
    email: EmailStr
    user_type: str
    phone: str = ''
    location: str = ''
    is_archived: bool = False
    created_at: Optional[UtcDatetime] = None

class TokenOut(CamelModel):
    access_token: str
    token_type: str = 'bearer'
    user: UserOut

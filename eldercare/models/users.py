from sqlalchemy import Column, Integer, String, Boolean, DateTime
from . import Base, utcnow

USER_TYPES = ('admin', 'owner', 'nutritionist', 'relative', 'nurse')

class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(150), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    user_type = Column(String(32), index=True, nullable=False)
    phone = Column(String(50), nullable=False, default='')
    location = Column(String(255), nullable=False, default='')
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from . import Base, utcnow

class EmergencyAlert(Base):
    __tablename__ = 'emergency_alerts'
    id = Column(Integer, primary_key=True)
    # residents live outside this service, so no foreign key
    resident_id = Column(Integer, index=True, nullable=False)
    resident_name = Column(String(150), nullable=False)
    message = Column(Text, nullable=False)
    emergency_contact = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    read = Column(Boolean, nullable=False, default=False)

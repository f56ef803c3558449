from typing import List, Optional
from . import CamelModel, UtcDatetime

class EmergencyContact(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    relation: Optional[str] = None

class AlertIn(CamelModel):
    resident_id: int
    resident_name: str
    message: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None

class AlertOut(CamelModel):
    id: int
    resident_id: int
    resident_name: str
    message: str
    emergency_contact: Optional[EmergencyContact] = None
    timestamp: UtcDatetime
    read: bool

class AlertCreatedOut(CamelModel):
    alert: AlertOut
    message: str

class MarkAlertsReadIn(CamelModel):
    alert_ids: List[int]

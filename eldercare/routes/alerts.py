import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List
from ..schemas import StatusOut
from ..schemas.alerts import AlertIn, AlertOut, AlertCreatedOut, MarkAlertsReadIn
from ..crud import create_alert, list_alerts, mark_alerts_as_read
from ..core import ALERTS_CREATED
from ..auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('', response_model=AlertCreatedOut, status_code=201)
async def create(payload: AlertIn, current_user: dict = Depends(get_current_user)):
    contact = payload.emergency_contact.model_dump() if payload.emergency_contact else None
    try:
        alert = await create_alert(payload.resident_id, payload.resident_name, payload.message, contact)
    except Exception as e:
        logger.error(f"Emergency alert error: {e}")
        raise HTTPException(500, f"Failed to create emergency alert: {str(e)}")
    ALERTS_CREATED.inc()
    logger.info(f"Emergency alert {alert.id} raised for resident {alert.resident_id} by user {current_user['id']}")
    return {'alert': alert, 'message': 'Emergency alert created successfully'}


@router.put('/mark-read', response_model=StatusOut)
async def mark_read(payload: MarkAlertsReadIn, current_user: dict = Depends(get_current_user)):
    try:
        await mark_alerts_as_read(payload.alert_ids)
    except Exception as e:
        logger.error(f"Error marking alerts as read: {e}")
        raise HTTPException(500, f"Failed to mark alerts as read: {str(e)}")
    return {'message': 'Alerts marked as read successfully'}


@router.get('/{resident_id}', response_model=List[AlertOut])
async def resident_alerts(resident_id: int, current_user: dict = Depends(get_current_user)):
    try:
        return await list_alerts(resident_id)
    except Exception as e:
        logger.error(f"Error fetching emergency alerts: {e}")
        raise HTTPException(500, f"Failed to fetch emergency alerts: {str(e)}")

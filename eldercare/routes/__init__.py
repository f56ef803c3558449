from fastapi import APIRouter
from .users import router as users_router
from .messages import router as messages_router
from .alerts import router as alerts_router

router = APIRouter()
router.include_router(users_router, prefix='/users', tags=['users'])
router.include_router(alerts_router, prefix='/emergency-alerts', tags=['emergency-alerts'])
router.include_router(messages_router, tags=['messages'])

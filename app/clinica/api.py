from fastapi import APIRouter

from app.clinica.core.config import settings
from app.clinica.routers.auth import router as auth_router
from app.clinica.routers.cash_cuts import router as cash_cuts_router
from app.clinica.routers.health import router as health_router
from app.clinica.routers.metrics import router as metrics_router
from app.clinica.routers.settings import router as settings_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router, prefix="/clinica/auth", tags=["auth"])
api_router.include_router(cash_cuts_router, tags=["pos-cash"])
api_router.include_router(settings_router, tags=["settings"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])

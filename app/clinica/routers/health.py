from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.clinica.core.error_catalog import ErrorCatalog
from app.clinica.core.errors import error_response
from app.clinica.db.session import get_db

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    return {"status": "ok", "trace_id": getattr(request.state, "trace_id", "")}


@router.get("/ready")
def ready(request: Request, db=Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return error_response(request, ErrorCatalog.DB_UNAVAILABLE, str(exc))
    return {"status": "ready", "trace_id": getattr(request.state, "trace_id", "")}

from fastapi import APIRouter, Depends

from app.clinica.core.context import RequestContext
from app.clinica.core.deps import require_active_user, require_permission, require_request_context
from app.clinica.db.session import get_db
from app.clinica.schemas.settings import CutScheduleResponse, CutScheduleUpdateRequest
from app.clinica.services.access_control import SETTINGS_MANAGE
from app.clinica.services.cut_schedule import CutSchedule, CutScheduleService

router = APIRouter(prefix="/clinica/settings")


def _schedule_response(schedule: CutSchedule) -> CutScheduleResponse:
    return CutScheduleResponse(
        first_cut=schedule.first_cut,
        second_cut=schedule.second_cut,
        is_default=schedule.is_default,
    )


@router.get("/cut-schedule", response_model=CutScheduleResponse)
def get_cut_schedule(db=Depends(get_db), _user=Depends(require_active_user)):
    return _schedule_response(CutScheduleService(db).get_active(persist_default=True))


@router.put("/cut-schedule", response_model=CutScheduleResponse)
def update_cut_schedule(
    payload: CutScheduleUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_request_context),
    _permission=Depends(require_permission(SETTINGS_MANAGE)),
):
    schedule = CutScheduleService(db).update(payload.first_cut, payload.second_cut, actor=context)
    return _schedule_response(schedule)

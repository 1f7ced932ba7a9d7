from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from app.clinica.core.clock import Clock, business_date, from_storage, get_clock, time_of_day
from app.clinica.core.context import RequestContext
from app.clinica.core.deps import require_permission, require_request_context
from app.clinica.db.models import CashCutRecord, Sale
from app.clinica.db.session import get_db
from app.clinica.schemas.cash_cuts import (
    AdminConfirmationRequest,
    AdminConfirmationResponse,
    CashCutListResponse,
    CashCutRecordResponse,
    CashCutRequest,
    CutPreviewResponse,
    ManualCashCutRequest,
    OpeningBalancePromptResponse,
    OpeningBalanceRequest,
    SaleResponse,
    SessionStateResponse,
    SessionSummaryResponse,
    WindowTotalsResponse,
)
from app.clinica.services.access_control import CASH_CUT_MANUAL, CASH_CUT_SCHEDULED, CASH_OPEN, CASH_VIEW
from app.clinica.services.admin_confirmation import AdminConfirmationService
from app.clinica.services.cut_processor import CashCutService, CutPreview
from app.clinica.services.session_resolver import SessionState
from app.clinica.services.window_accumulator import WindowTotals, to_money

router = APIRouter(prefix="/clinica/pos/cash")


def _local(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return from_storage(value)


def _record_response(record: CashCutRecord) -> CashCutRecordResponse:
    return CashCutRecordResponse(
        id=str(record.id),
        business_date=record.business_date,
        ledger_seq=record.ledger_seq,
        cut_time=record.cut_time,
        is_opening=record.is_opening,
        is_manual=record.is_manual,
        opening_balance=to_money(record.opening_balance),
        cash_sales=to_money(record.cash_sales),
        card_sales=to_money(record.card_sales),
        transfer_sales=to_money(record.transfer_sales),
        total_sales=to_money(record.total_sales),
        sales_count=record.sales_count,
        closing_balance_reported=to_money(record.closing_balance_reported),
        discrepancy=to_money(record.discrepancy),
        window_start=_local(record.window_start),
        notes=record.notes,
        recorded_by_user_id=str(record.recorded_by_user_id) if record.recorded_by_user_id else None,
        created_at=_local(record.created_at),
    )


def _totals_response(totals: WindowTotals) -> WindowTotalsResponse:
    return WindowTotalsResponse(
        cash=totals.cash,
        card=totals.card,
        transfer=totals.transfer,
        total=totals.total,
        count=totals.count,
    )


def _sale_response(sale: Sale) -> SaleResponse:
    return SaleResponse(
        id=str(sale.id),
        folio=sale.folio,
        total=to_money(sale.total),
        payment_method=sale.payment_method,
        created_at=_local(sale.created_at),
    )


def _state_response(state: SessionState, now: datetime, labels) -> SessionStateResponse:
    return SessionStateResponse(
        state=state.regime.value,
        due_label=state.due_label,
        redirect_to=state.redirect_to,
        business_date=business_date(now),
        now=now,
        scheduled_labels=list(labels),
    )


def _preview_response(preview: CutPreview) -> CutPreviewResponse:
    return CutPreviewResponse(
        label=preview.label,
        business_date=preview.business_date,
        is_manual=preview.is_manual,
        already_recorded=preview.already_recorded,
        since=_local(preview.since),
        opening_balance=to_money(preview.opening_balance),
        totals=_totals_response(preview.totals),
        expected_cash_balance=preview.expected_cash_balance,
        sales=[_sale_response(sale) for sale in preview.sales],
    )


@router.get("/state", response_model=SessionStateResponse)
def get_session_state(
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    now = clock.now()
    service = CashCutService(db)
    return _state_response(service.resolve_state(now), now, service.schedule.current_labels())


@router.get("/entry", response_model=SessionStateResponse)
def pos_entry(
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    now = clock.now()
    service = CashCutService(db)
    state = service.resolve_state(now)
    if not state.allows_entry:
        return RedirectResponse(url=state.redirect_to, status_code=303)
    return _state_response(state, now, service.schedule.current_labels())


@router.get("/opening-balance", response_model=OpeningBalancePromptResponse)
def get_opening_balance(
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    now = clock.now()
    service = CashCutService(db)
    opening = service.repo.get_opening(business_date(now))
    return OpeningBalancePromptResponse(
        business_date=business_date(now),
        needs_opening_balance=opening is None,
        opening=_record_response(opening) if opening is not None else None,
    )


@router.post("/opening-balance", response_model=CashCutRecordResponse, status_code=201)
def post_opening_balance(
    payload: OpeningBalanceRequest,
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    context: RequestContext = Depends(require_request_context),
    _permission=Depends(require_permission(CASH_OPEN)),
):
    record = CashCutService(db).open_session(payload.amount, context, clock.now())
    return _record_response(record)


@router.get("/cuts/pending", response_model=CutPreviewResponse)
def get_pending_cut(
    label: str = Query(...),
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    return _preview_response(CashCutService(db).preview(label, clock.now()))


@router.get("/cuts/manual", response_model=CutPreviewResponse)
def get_manual_cut(
    label: str | None = Query(default=None),
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    now = clock.now()
    effective_label = label or time_of_day(now).strftime("%H:%M")
    return _preview_response(CashCutService(db).preview(effective_label, now, manual=True))


@router.post("/cuts", response_model=CashCutRecordResponse, status_code=201)
def post_scheduled_cut(
    payload: CashCutRequest,
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    context: RequestContext = Depends(require_request_context),
    _permission=Depends(require_permission(CASH_CUT_SCHEDULED)),
):
    record = CashCutService(db).record_cut(
        payload.cut_time,
        payload.reported_balance,
        payload.notes,
        context,
        clock.now(),
    )
    return _record_response(record)


@router.post("/cuts/manual", response_model=CashCutRecordResponse, status_code=201)
def post_manual_cut(
    payload: ManualCashCutRequest,
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    context: RequestContext = Depends(require_request_context),
    _permission=Depends(require_permission(CASH_CUT_MANUAL)),
):
    AdminConfirmationService(db).confirm(payload.admin_password, requested_by=context.username)
    now = clock.now()
    label = payload.cut_time or time_of_day(now).strftime("%H:%M")
    record = CashCutService(db).record_cut(
        label,
        payload.reported_balance,
        payload.notes,
        context,
        now,
        manual=True,
    )
    return _record_response(record)


@router.get("/cuts", response_model=CashCutListResponse)
def list_cuts(
    business_date_filter: date | None = Query(default=None, alias="business_date"),
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    day = business_date_filter or business_date(clock.now())
    rows = [_record_response(record) for record in CashCutService(db).day_ledger(day)]
    return CashCutListResponse(business_date=day, rows=rows, total=len(rows))


@router.get("/summary", response_model=SessionSummaryResponse)
def get_summary(
    db=Depends(get_db),
    clock: Clock = Depends(get_clock),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    summary = CashCutService(db).summary(clock.now())
    return SessionSummaryResponse(
        business_date=summary.business_date,
        state=summary.state.regime.value,
        due_label=summary.state.due_label,
        since=_local(summary.since),
        opening_balance=to_money(summary.opening_balance) if summary.opening_balance is not None else None,
        totals=_totals_response(summary.totals),
        expected_cash_balance=summary.expected_cash_balance,
    )


@router.post("/admin-confirmations", response_model=AdminConfirmationResponse)
def confirm_admin(
    request: Request,
    payload: AdminConfirmationRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_request_context),
    _permission=Depends(require_permission(CASH_VIEW)),
):
    admin = AdminConfirmationService(db).confirm(payload.password, requested_by=context.username)
    return AdminConfirmationResponse(
        confirmed=True,
        admin_username=admin.username,
        trace_id=getattr(request.state, "trace_id", ""),
    )

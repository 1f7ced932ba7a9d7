from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError

from app.clinica.core.clock import business_date, time_of_day, to_storage
from app.clinica.core.context import RequestContext
from app.clinica.core.error_catalog import AppError, ErrorCatalog
from app.clinica.core.logging import log_json
from app.clinica.core.metrics import metrics
from app.clinica.db.models import CashCutRecord
from app.clinica.repos.cash_cuts import CashCutRepository
from app.clinica.repos.sales import SaleRepository
from app.clinica.services.audit import AuditEventPayload, AuditService
from app.clinica.services.cut_schedule import CutScheduleService, label_minutes, normalize_label
from app.clinica.services.session_resolver import SessionState, resolve
from app.clinica.services.window_accumulator import ZERO, WindowTotals, accumulate, to_money

logger = logging.getLogger(__name__)

LEDGER_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class CutWindow:
    """Lower bound of the open window and the balance carried into it."""

    since: datetime
    opening_balance: Decimal
    anchor: CashCutRecord


@dataclass
class CutPreview:
    label: str
    business_date: date
    is_manual: bool
    already_recorded: bool
    since: datetime
    opening_balance: Decimal
    totals: WindowTotals
    sales: list = field(default_factory=list)

    @property
    def expected_cash_balance(self) -> Decimal:
        return self.totals.expected_cash(self.opening_balance)


@dataclass
class SessionSummary:
    business_date: date
    state: SessionState
    since: datetime | None
    opening_balance: Decimal | None
    totals: WindowTotals

    @property
    def expected_cash_balance(self) -> Decimal | None:
        if self.opening_balance is None:
            return None
        return self.totals.expected_cash(self.opening_balance)


def _validate_amount(value) -> Decimal:
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, details={"value": str(value)}) from exc
    if amount < ZERO:
        raise AppError(ErrorCatalog.INVALID_AMOUNT, details={"value": str(value)})
    return amount


def _discrepancy_direction(discrepancy: Decimal) -> str:
    if discrepancy < ZERO:
        return "short"
    if discrepancy > ZERO:
        return "over"
    return "even"


def _actor_fields(actor: RequestContext | None) -> dict:
    if actor is None:
        return {"user_id": None, "trace_id": None, "actor": "system"}
    return {"user_id": actor.user_id, "trace_id": actor.trace_id, "actor": actor.username or actor.user_id or "unknown"}


def record_snapshot(record: CashCutRecord) -> dict:
    return {
        "id": str(record.id),
        "business_date": record.business_date.isoformat(),
        "ledger_seq": record.ledger_seq,
        "cut_time": record.cut_time,
        "is_manual": record.is_manual,
        "opening_balance": str(record.opening_balance),
        "cash_sales": str(record.cash_sales),
        "card_sales": str(record.card_sales),
        "transfer_sales": str(record.transfer_sales),
        "total_sales": str(record.total_sales),
        "sales_count": record.sales_count,
        "closing_balance_reported": str(record.closing_balance_reported),
        "discrepancy": str(record.discrepancy),
    }


class CashCutService:
    """Cash ledger operations for a single till.

    The ledger is append-only: an opening-balance record (``cut_time`` NULL)
    starts each business day and every cut appends one record whose opening
    balance is the previous record's reported closing balance. Every method
    takes ``now`` from the caller; nothing here reads the system clock.
    """

    def __init__(self, db, schedule_service: CutScheduleService | None = None):
        self.db = db
        self.repo = CashCutRepository(db)
        self.sales = SaleRepository(db)
        self.schedule = schedule_service or CutScheduleService(db)

    # reads

    def todays_records(self, now: datetime) -> list[CashCutRecord]:
        return list(self.repo.list_for_day(business_date(now)))

    def day_ledger(self, day: date) -> list[CashCutRecord]:
        return list(self.repo.list_for_day(day))

    def resolve_state(self, now: datetime) -> SessionState:
        return resolve(now, self.todays_records(now), self.schedule.current_labels())

    def current_window(self, now: datetime, *, for_update: bool = False) -> CutWindow | None:
        day = business_date(now)
        # writers of the same day queue on the opening row before reading the latest record
        if self.repo.get_opening(day, for_update=for_update) is None:
            return None
        latest = self.repo.get_latest(day)
        return CutWindow(since=latest.created_at, opening_balance=latest.closing_balance_reported, anchor=latest)

    def window_totals(self, since: datetime) -> tuple[WindowTotals, list]:
        sales = list(self.sales.list_since(since))
        return accumulate(sales, since), sales

    def summary(self, now: datetime) -> SessionSummary:
        state = self.resolve_state(now)
        window = self.current_window(now)
        if window is None:
            return SessionSummary(
                business_date=business_date(now),
                state=state,
                since=None,
                opening_balance=None,
                totals=WindowTotals(),
            )
        totals, _ = self.window_totals(window.since)
        return SessionSummary(
            business_date=business_date(now),
            state=state,
            since=window.since,
            opening_balance=window.opening_balance,
            totals=totals,
        )

    def preview(self, label: str, now: datetime, *, manual: bool = False) -> CutPreview:
        normalized = self._check_label(label, now, manual=manual, enforce_due=False)
        window = self.current_window(now)
        if window is None:
            raise AppError(ErrorCatalog.MISSING_OPENING_BALANCE, details={"business_date": business_date(now).isoformat()})
        totals, sales = self.window_totals(window.since)
        recorded = {record.cut_time for record in self.todays_records(now)}
        return CutPreview(
            label=normalized,
            business_date=business_date(now),
            is_manual=manual,
            already_recorded=normalized in recorded,
            since=window.since,
            opening_balance=window.opening_balance,
            totals=totals,
            sales=sales,
        )

    # writes

    def open_session(self, amount, actor: RequestContext | None, now: datetime) -> CashCutRecord:
        day = business_date(now)
        try:
            opening_amount = _validate_amount(amount)
        except AppError as exc:
            self._log_rejection(exc, kind="opening", label=None)
            raise
        if self.repo.get_opening(day) is not None:
            self._reject(ErrorCatalog.DUPLICATE_OPENING_BALANCE, kind="opening", label=None, day=day)

        record = CashCutRecord(
            business_date=day,
            ledger_seq=0,
            cut_time=None,
            is_manual=False,
            opening_balance=opening_amount,
            cash_sales=ZERO,
            card_sales=ZERO,
            transfer_sales=ZERO,
            total_sales=ZERO,
            sales_count=0,
            closing_balance_reported=opening_amount,
            discrepancy=ZERO,
            window_start=None,
            recorded_by_user_id=self._actor_uuid(actor),
            created_at=to_storage(now),
        )
        self._insert(record, ErrorCatalog.DUPLICATE_OPENING_BALANCE, kind="opening")
        self._after_insert(record, actor, kind="opening", action="cash_cut.open")
        return record

    def record_cut(
        self,
        label: str,
        reported_balance,
        notes: str | None,
        actor: RequestContext | None,
        now: datetime,
        *,
        manual: bool = False,
    ) -> CashCutRecord:
        kind = "manual" if manual else "scheduled"
        day = business_date(now)
        try:
            normalized = self._check_label(label, now, manual=manual, enforce_due=True)
            reported = _validate_amount(reported_balance)
        except AppError as exc:
            self._log_rejection(exc, kind=kind, label=label)
            raise

        conflict = None
        for attempt in range(1, LEDGER_WRITE_ATTEMPTS + 1):
            # latest-record read, window computation and insert share one transaction
            window = self.current_window(now, for_update=True)
            if any(record.cut_time == normalized for record in self.repo.list_for_day(day)):
                self._reject(ErrorCatalog.DUPLICATE_CUT, kind=kind, label=normalized, day=day)
            if window is None:
                self._reject(ErrorCatalog.MISSING_OPENING_BALANCE, kind=kind, label=normalized, day=day)

            record = self._build_cut(window, normalized, reported, notes, actor, now, manual=manual)
            seq = record.ledger_seq
            try:
                self.repo.add(record)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                if self.repo.get_by_cut_time(day, normalized) is not None:
                    error = AppError(
                        ErrorCatalog.DUPLICATE_CUT,
                        details={"business_date": day.isoformat(), "cut_time": normalized},
                    )
                    self._log_rejection(error, kind=kind, label=normalized)
                    raise error from exc
                # another cut took the same ledger position; rebuild from the new latest record
                log_json(
                    logger,
                    {
                        "event": "cash_cut.ledger_conflict",
                        "kind": kind,
                        "cut_time": normalized,
                        "ledger_seq": seq,
                        "attempt": attempt,
                    },
                    level=logging.WARNING,
                )
                conflict = exc
                continue
            self.db.refresh(record)
            self._after_insert(record, actor, kind=kind, action=f"cash_cut.{kind}")
            return record

        error = AppError(
            ErrorCatalog.LEDGER_CONFLICT,
            details={"business_date": day.isoformat(), "cut_time": normalized, "attempts": LEDGER_WRITE_ATTEMPTS},
        )
        self._log_rejection(error, kind=kind, label=normalized)
        raise error from conflict

    def _build_cut(
        self,
        window: CutWindow,
        label: str,
        reported: Decimal,
        notes: str | None,
        actor: RequestContext | None,
        now: datetime,
        *,
        manual: bool,
    ) -> CashCutRecord:
        totals, _ = self.window_totals(window.since)
        opening_balance = to_money(window.opening_balance)
        return CashCutRecord(
            business_date=window.anchor.business_date,
            ledger_seq=window.anchor.ledger_seq + 1,
            cut_time=label,
            is_manual=manual,
            opening_balance=opening_balance,
            cash_sales=totals.cash,
            card_sales=totals.card,
            transfer_sales=totals.transfer,
            total_sales=totals.total,
            sales_count=totals.count,
            closing_balance_reported=reported,
            discrepancy=reported - (opening_balance + totals.cash),
            window_start=window.since,
            notes=notes.strip() if notes and notes.strip() else None,
            recorded_by_user_id=self._actor_uuid(actor),
            # kept at or after the anchor so windows never overlap
            created_at=max(to_storage(now), window.since),
        )

    # helpers

    def _check_label(self, label: str | None, now: datetime, *, manual: bool, enforce_due: bool) -> str:
        normalized = normalize_label(label)
        if normalized is None:
            raise AppError(ErrorCatalog.INVALID_CUT_TIME, details={"reason": "malformed", "label": label})
        if manual:
            return normalized
        labels = self.schedule.current_labels()
        if normalized not in labels:
            raise AppError(
                ErrorCatalog.INVALID_CUT_TIME,
                details={"reason": "not_scheduled", "label": normalized, "scheduled_labels": list(labels)},
            )
        current = time_of_day(now)
        if enforce_due and current.hour * 60 + current.minute < label_minutes(normalized):
            raise AppError(
                ErrorCatalog.INVALID_CUT_TIME,
                details={"reason": "not_due", "label": normalized, "now": current.strftime("%H:%M")},
            )
        return normalized

    def _reject(self, error, *, kind: str, label: str | None, day: date):
        self.db.rollback()
        exc = AppError(error, details={"business_date": day.isoformat(), "cut_time": label})
        self._log_rejection(exc, kind=kind, label=label)
        raise exc

    def _insert(self, record: CashCutRecord, duplicate_error, *, kind: str) -> None:
        try:
            self.repo.add(record)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            error = AppError(
                duplicate_error,
                details={"business_date": record.business_date.isoformat(), "cut_time": record.cut_time},
            )
            self._log_rejection(error, kind=kind, label=record.cut_time)
            raise error from exc
        self.db.refresh(record)

    def _after_insert(self, record: CashCutRecord, actor: RequestContext | None, *, kind: str, action: str) -> None:
        snapshot = record_snapshot(record)
        if kind == "opening":
            metrics.record_cash_cut(kind=kind)
            log_json(logger, {"event": "cash_cut.opened", **snapshot})
        else:
            direction = _discrepancy_direction(record.discrepancy)
            metrics.record_cash_cut(kind=kind, direction=direction)
            log_json(logger, {"event": "cash_cut.recorded", "kind": kind, "direction": direction, **snapshot})
        AuditService(self.db).record_event(
            AuditEventPayload(
                **_actor_fields(actor),
                action=action,
                entity_type="cash_cut_record",
                entity_id=str(record.id),
                before=None,
                after=snapshot,
                metadata={"kind": kind},
                result="success",
            )
        )

    def _log_rejection(self, exc: AppError, *, kind: str, label: str | None) -> None:
        log_json(
            logger,
            {"event": "cash_cut.rejected", "kind": kind, "cut_time": label, "code": exc.error.code, "details": exc.details},
            level=logging.WARNING,
        )

    @staticmethod
    def _actor_uuid(actor: RequestContext | None):
        if actor is None or not actor.user_id:
            return None
        return uuid.UUID(str(actor.user_id))

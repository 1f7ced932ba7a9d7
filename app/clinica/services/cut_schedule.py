from __future__ import annotations

import re
from dataclasses import dataclass

from app.clinica.core.config import settings
from app.clinica.core.error_catalog import AppError, ErrorCatalog
from app.clinica.db.models import CutScheduleSettings
from app.clinica.repos.cut_schedule import CutScheduleRepository
from app.clinica.services.audit import AuditEventPayload, AuditService

LABEL_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def normalize_label(value: str | None) -> str | None:
    """Return ``value`` as zero-padded ``HH:MM``, or None when malformed."""
    if value is None:
        return None
    match = LABEL_PATTERN.match(value.strip())
    if match is None:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def label_minutes(label: str) -> int:
    hours, minutes = label.split(":")
    return int(hours) * 60 + int(minutes)


def validate_schedule(first: str, second: str) -> tuple[str, str]:
    first_label = normalize_label(first)
    second_label = normalize_label(second)
    invalid = [
        field
        for field, label in (("first_cut", first_label), ("second_cut", second_label))
        if label is None
    ]
    if invalid:
        raise AppError(
            ErrorCatalog.INVALID_CUT_SCHEDULE,
            details={"fields": invalid, "message": "Times must use the HH:MM format"},
        )
    if label_minutes(first_label) >= label_minutes(second_label):
        raise AppError(
            ErrorCatalog.INVALID_CUT_SCHEDULE,
            details={"message": "The first cut must be earlier than the second cut"},
        )
    return first_label, second_label


@dataclass(frozen=True)
class CutSchedule:
    first_cut: str
    second_cut: str
    is_default: bool = False

    @property
    def labels(self) -> tuple[str, str]:
        return (self.first_cut, self.second_cut)


def default_schedule() -> CutSchedule:
    first, second = validate_schedule(settings.CASH_CUT_TIME_1, settings.CASH_CUT_TIME_2)
    return CutSchedule(first_cut=first, second_cut=second, is_default=True)


class CutScheduleService:
    def __init__(self, db):
        self.db = db
        self.repo = CutScheduleRepository(db)

    def get_active(self, *, persist_default: bool = False) -> CutSchedule:
        row = self.repo.get_active()
        if row is not None:
            return CutSchedule(first_cut=row.first_cut, second_cut=row.second_cut)
        schedule = default_schedule()
        if persist_default:
            self.repo.add(CutScheduleSettings(first_cut=schedule.first_cut, second_cut=schedule.second_cut))
            self.db.commit()
        return schedule

    def current_labels(self) -> tuple[str, str]:
        return self.get_active().labels

    def update(self, first_cut: str, second_cut: str, *, actor=None) -> CutSchedule:
        first, second = validate_schedule(first_cut, second_cut)
        before = self.get_active()
        self.repo.deactivate_all()
        self.repo.add(
            CutScheduleSettings(
                first_cut=first,
                second_cut=second,
                updated_by_user_id=actor.user_id if actor is not None else None,
            )
        )
        self.db.commit()
        AuditService(self.db).record_event(
            AuditEventPayload(
                user_id=actor.user_id if actor is not None else None,
                trace_id=actor.trace_id if actor is not None else None,
                actor=actor.username if actor is not None and actor.username else "system",
                action="cut_schedule.update",
                entity_type="cut_schedule_settings",
                entity_id=None,
                before={"first_cut": before.first_cut, "second_cut": before.second_cut},
                after={"first_cut": first, "second_cut": second},
                metadata=None,
                result="success",
            )
        )
        return CutSchedule(first_cut=first, second_cut=second)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence
from urllib.parse import quote

from app.clinica.core.clock import time_of_day
from app.clinica.services.cut_schedule import label_minutes

OPENING_BALANCE_PATH = "/clinica/pos/cash/opening-balance"
PENDING_CUT_PATH = "/clinica/pos/cash/cuts/pending"


class SessionRegime(str, Enum):
    NEEDS_OPENING_BALANCE = "NEEDS_OPENING_BALANCE"
    NEEDS_SCHEDULED_CUT = "NEEDS_SCHEDULED_CUT"
    OPEN = "OPEN"


@dataclass(frozen=True)
class SessionState:
    regime: SessionRegime
    due_label: str | None = None

    @property
    def redirect_to(self) -> str | None:
        if self.regime is SessionRegime.NEEDS_OPENING_BALANCE:
            return OPENING_BALANCE_PATH
        if self.regime is SessionRegime.NEEDS_SCHEDULED_CUT:
            return f"{PENDING_CUT_PATH}?label={quote(self.due_label or '')}"
        return None

    @property
    def allows_entry(self) -> bool:
        return self.regime is SessionRegime.OPEN


def resolve(now: datetime, todays_records: Iterable, scheduled_labels: Sequence[str]) -> SessionState:
    """Work out which regime the cash drawer is in at ``now``.

    Priority: a missing opening balance wins over everything, then the
    earliest scheduled label that is due and has no record today, then open.
    ``scheduled_labels`` are expected normalized and in ascending order.
    """
    records = list(todays_records)
    if not any(record.cut_time is None for record in records):
        return SessionState(SessionRegime.NEEDS_OPENING_BALANCE)

    recorded_labels = {record.cut_time for record in records if record.cut_time is not None}
    current = time_of_day(now)
    current_minutes = current.hour * 60 + current.minute
    for label in scheduled_labels:
        if current_minutes >= label_minutes(label) and label not in recorded_labels:
            return SessionState(SessionRegime.NEEDS_SCHEDULED_CUT, due_label=label)
    return SessionState(SessionRegime.OPEN)

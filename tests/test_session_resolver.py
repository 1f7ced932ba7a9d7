from datetime import datetime, timezone
from types import SimpleNamespace

from app.clinica.services.session_resolver import SessionRegime, resolve
from tests.cash_helpers import local_time

LABELS = ("14:00", "18:00")


def _record(cut_time, hour=8):
    return SimpleNamespace(cut_time=cut_time, created_at=local_time(hour))


def test_no_records_needs_opening_balance():
    state = resolve(local_time(9, 0), [], LABELS)
    assert state.regime is SessionRegime.NEEDS_OPENING_BALANCE
    assert state.due_label is None
    assert state.redirect_to == "/clinica/pos/cash/opening-balance"


def test_cuts_without_opening_still_need_opening_balance():
    records = [_record("14:00", 14), _record("18:00", 18)]
    state = resolve(local_time(19, 0), records, LABELS)
    assert state.regime is SessionRegime.NEEDS_OPENING_BALANCE


def test_open_before_first_label():
    state = resolve(local_time(13, 59), [_record(None)], LABELS)
    assert state.regime is SessionRegime.OPEN
    assert state.redirect_to is None
    assert state.allows_entry


def test_label_is_due_at_its_exact_minute():
    state = resolve(local_time(14, 0), [_record(None)], LABELS)
    assert state.regime is SessionRegime.NEEDS_SCHEDULED_CUT
    assert state.due_label == "14:00"
    assert state.redirect_to == "/clinica/pos/cash/cuts/pending?label=14%3A00"


def test_only_earliest_unmet_label_is_reported():
    state = resolve(local_time(18, 30), [_record(None)], LABELS)
    assert state.due_label == "14:00"

    state = resolve(local_time(18, 30), [_record(None), _record("14:00", 14)], LABELS)
    assert state.regime is SessionRegime.NEEDS_SCHEDULED_CUT
    assert state.due_label == "18:00"


def test_open_after_all_scheduled_cuts_are_done():
    records = [_record(None), _record("14:00", 14), _record("18:00", 18)]
    state = resolve(local_time(21, 0), records, LABELS)
    assert state.regime is SessionRegime.OPEN


def test_manual_cut_with_other_label_does_not_satisfy_schedule():
    records = [_record(None), _record("16:30", 16)]
    state = resolve(local_time(16, 45), records, LABELS)
    assert state.due_label == "14:00"


def test_aware_utc_now_is_compared_in_business_time():
    # 20:30 UTC is 14:30 in Mexico City
    now = datetime(2026, 3, 10, 20, 30, tzinfo=timezone.utc)
    state = resolve(now, [_record(None)], LABELS)
    assert state.due_label == "14:00"


def test_resolve_is_deterministic():
    records = [_record(None), _record("14:00", 14)]
    now = local_time(18, 5)
    states = {resolve(now, records, LABELS) for _ in range(5)}
    assert len(states) == 1

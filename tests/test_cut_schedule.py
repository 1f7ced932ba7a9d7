import pytest
from sqlalchemy import select

from app.clinica.core.error_catalog import AppError, ErrorCatalog
from app.clinica.db.models import CutScheduleSettings
from app.clinica.services.cut_schedule import (
    CutScheduleService,
    label_minutes,
    normalize_label,
    validate_schedule,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("14:00", "14:00"),
        ("9:05", "09:05"),
        (" 18:30 ", "18:30"),
        ("00:00", "00:00"),
        ("23:59", "23:59"),
        ("24:00", None),
        ("12:60", None),
        ("1400", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_label(value, expected):
    assert normalize_label(value) == expected


def test_label_minutes():
    assert label_minutes("14:00") == 840
    assert label_minutes("00:01") == 1


def test_validate_schedule_requires_first_before_second():
    assert validate_schedule("9:00", "17:30") == ("09:00", "17:30")
    with pytest.raises(AppError) as exc:
        validate_schedule("18:00", "14:00")
    assert exc.value.error is ErrorCatalog.INVALID_CUT_SCHEDULE
    with pytest.raises(AppError):
        validate_schedule("14:00", "14:00")


def test_validate_schedule_reports_malformed_fields():
    with pytest.raises(AppError) as exc:
        validate_schedule("25:00", "18:00")
    assert exc.value.details["fields"] == ["first_cut"]


def test_defaults_are_returned_when_no_row(db_session):
    db_session.query(CutScheduleSettings).delete()
    db_session.commit()
    schedule = CutScheduleService(db_session).get_active()
    assert schedule.labels == ("14:00", "18:00")
    assert schedule.is_default


def test_update_deactivates_previous_row(db_session):
    service = CutScheduleService(db_session)
    service.get_active(persist_default=True)
    service.update("13:00", "19:30")
    service.update("12:00", "20:00")

    rows = db_session.execute(select(CutScheduleSettings)).scalars().all()
    active = [row for row in rows if row.is_active]
    assert len(rows) == 3
    assert len(active) == 1
    assert (active[0].first_cut, active[0].second_cut) == ("12:00", "20:00")
    assert service.current_labels() == ("12:00", "20:00")


def test_invalid_update_keeps_current_schedule(db_session):
    service = CutScheduleService(db_session)
    service.update("13:00", "19:30")
    with pytest.raises(AppError):
        service.update("19:30", "13:00")
    assert service.current_labels() == ("13:00", "19:30")

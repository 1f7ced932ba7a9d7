from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from app.clinica.core.config import settings


class Clock:
    """Single source of "now" for a request.

    Routes take one reading per request and hand it to the services, so every
    comparison made while serving that request sees the same instant.
    """

    def __init__(self, tz_name: str | None = None):
        self.tz = ZoneInfo(tz_name or settings.CASH_TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self.tz)


def get_clock() -> Clock:
    return Clock()


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.CASH_TIMEZONE)


def to_business_time(now: datetime) -> datetime:
    # naive values are taken as already expressed in the business timezone
    if now.tzinfo is None:
        return now
    return now.astimezone(business_tz())


def business_date(now: datetime) -> date:
    return to_business_time(now).date()


def time_of_day(now: datetime) -> time:
    local = to_business_time(now)
    return time(local.hour, local.minute)


def to_storage(now: datetime) -> datetime:
    """Aware datetime -> naive UTC, the representation used by every table."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=business_tz())
    return now.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc).astimezone(business_tz())

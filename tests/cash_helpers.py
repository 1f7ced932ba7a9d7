from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from app.clinica.core.clock import Clock, to_storage
from app.clinica.core.context import RequestContext
from app.clinica.core.security import get_password_hash
from app.clinica.db.models import Sale, User

BUSINESS_TZ = ZoneInfo("America/Mexico_City")
DEFAULT_DAY = date(2026, 3, 10)
PASSWORD = "Pass1234!"
ADMIN_PASSWORD = "Admin1234!"


def local_time(hour: int, minute: int = 0, day: date = DEFAULT_DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=BUSINESS_TZ)


class FrozenClock(Clock):
    def __init__(self, now: datetime):
        super().__init__("America/Mexico_City")
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, hour: int, minute: int = 0, day: date | None = None) -> datetime:
        self.current = local_time(hour, minute, day or self.current.date())
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def create_user(db_session, *, username: str, role: str, password: str = PASSWORD, is_active: bool = True) -> User:
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@clinica.test",
        full_name=username.title(),
        hashed_password=get_password_hash(password),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    return user


def create_admin(db_session, username: str = "supervisor") -> User:
    return create_user(db_session, username=username, role="ADMIN", password=ADMIN_PASSWORD)


def actor_for(user: User) -> RequestContext:
    return RequestContext(user_id=str(user.id), username=user.username, role=user.role, trace_id="trace-test")


def add_sale(db_session, *, total, method: str = "cash", at: datetime) -> Sale:
    sale = Sale(
        id=uuid.uuid4(),
        total=Decimal(str(total)),
        payment_method=method,
        created_at=to_storage(at),
    )
    db_session.add(sale)
    db_session.commit()
    return sale


def login(client, username: str, password: str = PASSWORD) -> str:
    response = client.post(
        "/clinica/auth/login",
        json={"username_or_email": username, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}

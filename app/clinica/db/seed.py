from sqlalchemy import select

from app.clinica.core.config import settings
from app.clinica.core.security import get_password_hash
from app.clinica.db.models import CutScheduleSettings, User
from app.clinica.services.cut_schedule import default_schedule


def _get_or_create_admin(db):
    user = db.execute(select(User).where(User.username == settings.DEFAULT_ADMIN_USERNAME)).scalars().first()
    if user:
        return user
    user = User(
        username=settings.DEFAULT_ADMIN_USERNAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        full_name=settings.DEFAULT_ADMIN_FULL_NAME,
        hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        role="ADMIN",
        is_active=True,
    )
    db.add(user)
    return user


def _get_or_create_cut_schedule(db):
    row = (
        db.execute(select(CutScheduleSettings).where(CutScheduleSettings.is_active.is_(True)))
        .scalars()
        .first()
    )
    if row:
        return row
    schedule = default_schedule()
    row = CutScheduleSettings(first_cut=schedule.first_cut, second_cut=schedule.second_cut, is_active=True)
    db.add(row)
    return row


def run_seed(db):
    admin = _get_or_create_admin(db)
    _get_or_create_cut_schedule(db)
    db.commit()
    return admin


if __name__ == "__main__":
    from app.clinica.db.session import SessionLocal

    with SessionLocal() as session:
        run_seed(session)

from sqlalchemy import select

from app.clinica.db.models import CutScheduleSettings


class CutScheduleRepository:
    def __init__(self, db):
        self.db = db

    def get_active(self):
        stmt = (
            select(CutScheduleSettings)
            .where(CutScheduleSettings.is_active.is_(True))
            .order_by(CutScheduleSettings.created_at.desc())
        )
        return self.db.execute(stmt).scalars().first()

    def deactivate_all(self) -> None:
        stmt = select(CutScheduleSettings).where(CutScheduleSettings.is_active.is_(True))
        for row in self.db.execute(stmt).scalars().all():
            row.is_active = False

    def add(self, row: CutScheduleSettings) -> CutScheduleSettings:
        self.db.add(row)
        self.db.flush()
        return row

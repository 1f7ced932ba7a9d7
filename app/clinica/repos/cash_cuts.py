from datetime import date

from sqlalchemy import select

from app.clinica.db.models import CashCutRecord


class CashCutRepository:
    def __init__(self, db):
        self.db = db

    def list_for_day(self, business_date: date):
        stmt = (
            select(CashCutRecord)
            .where(CashCutRecord.business_date == business_date)
            .order_by(CashCutRecord.ledger_seq.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def get_opening(self, business_date: date, *, for_update: bool = False):
        stmt = select(CashCutRecord).where(
            CashCutRecord.business_date == business_date,
            CashCutRecord.cut_time.is_(None),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_by_cut_time(self, business_date: date, cut_time: str):
        stmt = select(CashCutRecord).where(
            CashCutRecord.business_date == business_date,
            CashCutRecord.cut_time == cut_time,
        )
        return self.db.execute(stmt).scalars().first()

    def get_latest(self, business_date: date):
        stmt = (
            select(CashCutRecord)
            .where(CashCutRecord.business_date == business_date)
            .order_by(CashCutRecord.ledger_seq.desc())
        )
        return self.db.execute(stmt).scalars().first()

    def list_business_dates(self):
        stmt = select(CashCutRecord.business_date).distinct().order_by(CashCutRecord.business_date.asc())
        return list(self.db.execute(stmt).scalars().all())

    def add(self, record: CashCutRecord) -> CashCutRecord:
        self.db.add(record)
        self.db.flush()
        return record

from datetime import datetime

from sqlalchemy import select

from app.clinica.db.models import Sale


class SaleRepository:
    def __init__(self, db):
        self.db = db

    def list_since(self, since: datetime):
        stmt = select(Sale).where(Sale.created_at >= since).order_by(Sale.created_at.asc())
        return self.db.execute(stmt).scalars().all()

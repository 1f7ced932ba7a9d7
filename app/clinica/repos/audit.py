from sqlalchemy import select

from app.clinica.db.models import AuditEvent


class AuditRepository:
    def __init__(self, db):
        self.db = db

    def create(self, event: AuditEvent) -> AuditEvent:
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def list_by_action(self, action: str):
        stmt = select(AuditEvent).where(AuditEvent.action == action).order_by(AuditEvent.created_at.asc())
        return self.db.execute(stmt).scalars().all()

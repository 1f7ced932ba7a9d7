import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from app.clinica.db.models import AuditEvent
from app.clinica.repos.audit import AuditRepository

logger = logging.getLogger(__name__)


@dataclass
class AuditEventPayload:
    user_id: str | None
    trace_id: str | None
    actor: str
    action: str
    entity_type: str
    entity_id: str | None
    before: dict | None
    after: dict | None
    metadata: dict | None
    result: str


class AuditService:
    """Best-effort audit logging.

    Runs after the business write has committed; failures are logged and
    swallowed so they never undo or fail the request.
    """

    def __init__(self, db):
        self.db = db
        self.repo = AuditRepository(db)

    def record_event(self, payload: AuditEventPayload) -> None:
        try:
            event = AuditEvent(
                user_id=uuid.UUID(str(payload.user_id)) if payload.user_id else None,
                trace_id=payload.trace_id,
                actor=payload.actor,
                action=payload.action,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                before_payload=payload.before,
                after_payload=payload.after,
                event_metadata=payload.metadata,
                result=payload.result,
                created_at=datetime.utcnow(),
            )
            self.repo.create(event)
        except Exception:
            self.db.rollback()
            logger.exception(
                "Failed to write audit event",
                extra={"action": payload.action, "trace_id": payload.trace_id, "entity_id": payload.entity_id},
            )

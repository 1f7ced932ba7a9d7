import logging

from app.clinica.core.error_catalog import AppError, ErrorCatalog
from app.clinica.core.logging import log_json
from app.clinica.core.security import verify_password
from app.clinica.repos.users import UserRepository

logger = logging.getLogger(__name__)


class AdminConfirmationService:
    """Supervisor override for manual cuts.

    The password is checked against every active administrator, so a
    receptionist can have any administrator on site confirm the cut.
    """

    def __init__(self, db):
        self.repo = UserRepository(db)

    def confirm(self, password: str, *, requested_by: str | None = None):
        admins = self.repo.list_active_admins()
        if not admins:
            raise AppError(ErrorCatalog.ADMIN_NOT_FOUND)
        for admin in admins:
            if verify_password(password, admin.hashed_password):
                log_json(
                    logger,
                    {"event": "admin_confirmation.granted", "admin": admin.username, "requested_by": requested_by},
                )
                return admin
        log_json(
            logger,
            {"event": "admin_confirmation.denied", "requested_by": requested_by},
            level=logging.WARNING,
        )
        raise AppError(ErrorCatalog.ADMIN_CONFIRMATION_FAILED)

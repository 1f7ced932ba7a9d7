import uuid

from sqlalchemy import func, or_, select

from app.clinica.db.models import User


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id):
        try:
            key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            return None
        return self.db.get(User, key)

    def get_by_username_or_email(self, username_or_email: str):
        value = username_or_email.strip()
        stmt = select(User).where(
            or_(
                func.lower(User.username) == value.lower(),
                func.lower(User.email) == value.lower(),
            )
        )
        return self.db.execute(stmt).scalars().first()

    def list_active_admins(self):
        stmt = (
            select(User)
            .where(func.upper(User.role) == "ADMIN", User.is_active.is_(True))
            .order_by(User.created_at.asc())
        )
        return self.db.execute(stmt).scalars().all()

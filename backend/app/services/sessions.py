"""Session store.

All reads and writes of the ``sessions`` table go through ``SessionStore`` so
the session policy lives in one place. The current policy allows a single
live session per user: ``replace_for_user`` drops the user's existing rows and
inserts the new one inside a single transaction.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.entities import UserSession


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: int
    expires: datetime


class SessionStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, token: str, expires_at: datetime) -> SessionRecord:
        self.db.add(UserSession(token=token, user_id=user_id, expires=expires_at))
        self.db.commit()
        return SessionRecord(token=token, user_id=user_id, expires=expires_at)

    def find(self, token: str) -> SessionRecord | None:
        row = self.db.query(UserSession).filter(UserSession.token == token).one_or_none()
        if row is None:
            return None
        return SessionRecord(token=row.token, user_id=row.user_id, expires=row.expires)

    def delete_by_token(self, token: str) -> None:
        # Deleting an absent token is a no-op.
        self.db.query(UserSession).filter(UserSession.token == token).delete(synchronize_session=False)
        self.db.commit()

    def delete_all_for_user(self, user_id: int) -> int:
        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    def replace_for_user(self, user_id: int, token: str, expires_at: datetime) -> SessionRecord:
        try:
            self.db.query(UserSession).filter(UserSession.user_id == user_id).delete(
                synchronize_session=False
            )
            self.db.add(UserSession(token=token, user_id=user_id, expires=expires_at))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return SessionRecord(token=token, user_id=user_id, expires=expires_at)

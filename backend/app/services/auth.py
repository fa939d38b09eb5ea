import base64
import hashlib
import hmac
import logging
import os
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.entities import User, UserRole
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(raw: str) -> bytes:
    padding = "=" * ((4 - len(raw) % 4) % 4)
    return base64.urlsafe_b64decode(raw + padding)


def hash_password(password: str, *, iterations: int | None = None) -> str:
    rounds = iterations or settings.password_hash_iterations
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    # The work factor travels with the hash so it can be raised without breaking old rows.
    return f"{HASH_ALGORITHM}${rounds}${_b64url_encode(salt)}${_b64url_encode(digest)}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, rounds, salt_b64, digest_b64 = encoded.split("$", 3)
        iterations = int(rounds)
        salt = _b64url_decode(salt_b64)
        expected = _b64url_decode(digest_b64)
    except (AttributeError, ValueError):
        # binascii.Error is a ValueError subclass.
        return False
    if algorithm != HASH_ALGORITHM or iterations < 1:
        return False
    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual, expected)


def create_session_token() -> str:
    return secrets.token_urlsafe(32)


def create_join_code() -> str:
    return secrets.token_hex(settings.join_code_bytes)


def expiry_from_now(seconds: int | None = None) -> datetime:
    return datetime.utcnow() + timedelta(seconds=seconds or settings.session_ttl_seconds)


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str
    email: str
    first_name: str
    role: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            role=user.role,
            created_at=user.created_at,
        )

    def as_dict(self) -> dict:
        return asdict(self)


def resolve_session(db: Session, token: str | None, *, now: datetime | None = None) -> Identity | None:
    """Turn a session cookie value into the signed-in identity.

    Returns ``None`` for every failure mode (no cookie, unknown token, expired
    session, missing user, database error) so callers cannot tell them apart.
    Expired sessions are deleted the first time they are seen here.
    """
    if not token:
        return None

    store = SessionStore(db)
    try:
        record = store.find(token)
        if record is None:
            return None

        if (now or datetime.utcnow()) > record.expires:
            store.delete_by_token(token)
            return None

        user = db.query(User).filter(User.user_id == record.user_id).one_or_none()
        if user is None:
            logger.warning("Session references missing user %s", record.user_id)
            return None
        return Identity.from_user(user)
    except SQLAlchemyError:
        logger.exception("Session lookup failed; treating request as signed out")
        db.rollback()
        return None


RolePredicate = Callable[[Identity], bool]


def any_role(identity: Identity) -> bool:
    return True


def is_student(identity: Identity) -> bool:
    return identity.role == UserRole.student.value


def is_teacher(identity: Identity) -> bool:
    return identity.role == UserRole.teacher.value


def authorize(identity: Identity | None, predicate: RolePredicate) -> bool:
    return identity is not None and predicate(identity)


LANDING_PAGES = {
    UserRole.student.value: "/dashboard",
    UserRole.teacher.value: "/dashboard",
}


def landing_page_for(identity: Identity) -> str:
    return LANDING_PAGES.get(identity.role, "/dashboard")

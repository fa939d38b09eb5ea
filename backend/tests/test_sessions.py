from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from app.models.entities import User, UserSession
from app.services.auth import hash_password, resolve_session, verify_password
from app.services.sessions import SessionStore


def _make_user(db, username="alice", role="Student"):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password=hash_password("correct-horse"),
        first_name=username.title(),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _session_count(db, user_id=None):
    query = db.query(UserSession)
    if user_id is not None:
        query = query.filter(UserSession.user_id == user_id)
    return query.count()


class _BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database unavailable"))

    def rollback(self):
        self.rolled_back = True


def test_password_hash_round_trip_and_format():
    encoded = hash_password("correct-horse", iterations=1000)
    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("correct-horse", encoded)
    assert not verify_password("wrong-horse", encoded)
    assert not verify_password("correct-horse", "not-a-hash")
    assert not verify_password("correct-horse", "md5$1$abc$def")


def test_malformed_stored_hash_never_verifies():
    assert not verify_password("correct-horse", "pbkdf2_sha256$1000$a$b")
    assert not verify_password("correct-horse", "pbkdf2_sha256$1000$%%$a")
    assert not verify_password("correct-horse", "pbkdf2_sha256$many$abcd$abcd")
    assert not verify_password("correct-horse", None)


def test_resolve_session_returns_identity_for_live_token(db):
    user = _make_user(db)
    SessionStore(db).create(user.user_id, "live-token", datetime.utcnow() + timedelta(hours=1))

    identity = resolve_session(db, "live-token")

    assert identity is not None
    assert identity.user_id == user.user_id
    assert identity.username == "alice"
    assert identity.role == "Student"


def test_resolve_session_fails_closed_without_token(db):
    assert resolve_session(db, None) is None
    assert resolve_session(db, "") is None
    assert resolve_session(db, "unknown-token") is None


def test_expired_session_is_deleted_once_and_stays_gone(db):
    user = _make_user(db)
    SessionStore(db).create(user.user_id, "old-token", datetime.utcnow() - timedelta(seconds=1))

    assert resolve_session(db, "old-token") is None
    assert _session_count(db, user.user_id) == 0
    # A second lookup of the same token is harmless.
    assert resolve_session(db, "old-token") is None
    assert _session_count(db) == 0


def test_expiry_uses_supplied_clock(db):
    user = _make_user(db)
    expires = datetime(2030, 1, 1, 12, 0, 0)
    SessionStore(db).create(user.user_id, "clock-token", expires)

    assert resolve_session(db, "clock-token", now=expires - timedelta(seconds=1)) is not None
    assert resolve_session(db, "clock-token", now=expires + timedelta(seconds=1)) is None
    assert _session_count(db) == 0


def test_session_for_missing_user_resolves_to_none(db):
    SessionStore(db).create(9999, "orphan-token", datetime.utcnow() + timedelta(hours=1))
    assert resolve_session(db, "orphan-token") is None


def test_database_errors_resolve_to_none():
    broken = _BrokenSession()
    assert resolve_session(broken, "any-token") is None
    assert broken.rolled_back


def test_replace_for_user_keeps_a_single_session(db):
    user = _make_user(db)
    other = _make_user(db, "bob")
    store = SessionStore(db)
    expires = datetime.utcnow() + timedelta(hours=1)
    store.create(user.user_id, "first", expires)
    store.create(other.user_id, "bobs-token", expires)

    store.replace_for_user(user.user_id, "second", expires)

    assert store.find("first") is None
    assert store.find("second").user_id == user.user_id
    assert store.find("bobs-token") is not None
    assert _session_count(db, user.user_id) == 1


def test_delete_helpers(db):
    user = _make_user(db)
    store = SessionStore(db)
    expires = datetime.utcnow() + timedelta(hours=1)
    store.create(user.user_id, "one", expires)

    store.delete_by_token("one")
    store.delete_by_token("one")
    assert store.find("one") is None

    store.create(user.user_id, "two", expires)
    assert store.delete_all_for_user(user.user_id) == 1
    assert store.delete_all_for_user(user.user_id) == 0

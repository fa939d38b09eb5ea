from app.core.config import settings
from app.models.entities import SchoolClass, Student, StudentStats, Subject, Teacher, User, UserSession
from app.services import accounts

from conftest import expire_sessions, student_signup, teacher_signup

COOKIE = settings.session_cookie_name


def _use_token(client, token):
    client.cookies.clear()
    client.cookies.set(COOKIE, token)


def test_signup_sets_cookie_and_creates_profile(client, db, courses):
    response = client.post(
        "/api/signup",
        json=student_signup(subjects=[{"subject_name": "Computer Science", "exam_board": "OCR"}]),
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Successfully signed up"}
    set_cookie = response.headers["set-cookie"].lower()
    assert f"{COOKIE.lower()}=" in set_cookie
    assert "httponly" in set_cookie
    assert "path=/" in set_cookie
    assert "samesite=lax" in set_cookie

    user = db.query(User).filter(User.username == "alice").one()
    assert user.password.startswith("pbkdf2_sha256$")
    assert db.query(Student).filter(Student.user_id == user.user_id).one().year_group == "12"
    assert db.query(Subject).filter(Subject.user_id == user.user_id).count() == 1
    stats = db.query(StudentStats).filter(StudentStats.user_id == user.user_id).one()
    assert (stats.streak, stats.pomodoro_time) == (0, 0)

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["role"] == "Student"


def test_teacher_signup_creates_classes_with_join_codes(client, db):
    client.post("/api/signup", json=teacher_signup(classes=["12A", "13B", "  "]))

    teacher = db.query(Teacher).one()
    assert teacher.display_name == "Mr Smith"
    classes = db.query(SchoolClass).order_by(SchoolClass.class_name).all()
    assert [c.class_name for c in classes] == ["12A", "13B"]
    assert all(len(c.join_code) == settings.join_code_bytes * 2 for c in classes)
    assert db.query(StudentStats).count() == 0


def test_signup_normalises_username_and_email(client, db):
    client.post("/api/signup", json=student_signup(username="  Alice ", email="ALICE@Example.com"))
    user = db.query(User).one()
    assert user.username == "alice"
    assert user.email == "alice@example.com"


def test_duplicate_signup_conflicts_without_new_rows(client, db, signup):
    signup(student_signup())
    client.cookies.clear()

    response = client.post("/api/signup", json=student_signup(email="other@example.com"))

    assert response.status_code == 409
    assert response.json() == {"error": accounts.DUPLICATE_USER_MESSAGE}
    assert db.query(User).count() == 1
    assert COOKIE not in client.cookies


def test_signup_validation_errors(client, db):
    response = client.post("/api/signup", json=student_signup(year_group=None))
    assert response.status_code == 400
    assert response.json() == {"error": "Year group is required for students"}

    response = client.post("/api/signup", json=teacher_signup(surname=None))
    assert response.status_code == 400

    response = client.post("/api/signup", json={"role": "Student"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Missing required fields"
    assert "username" in body["fields"]
    assert db.query(User).count() == 0


def test_failed_profile_is_rolled_back_and_alerted_once(client, db, monkeypatch):
    alerts = []

    def _broken_profile(*_args, **_kwargs):
        raise RuntimeError("profile insert failed")

    monkeypatch.setattr(accounts, "_create_profile", _broken_profile)
    monkeypatch.setattr(accounts, "send_signup_rollback_alert", lambda **kwargs: alerts.append(kwargs))

    response = client.post("/api/signup", json=student_signup())

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to create user profile"
    assert body["detail"] == {"error": "profile insert failed", "rolled_back": True}
    assert db.query(User).count() == 0
    assert db.query(Student).count() == 0
    assert db.query(UserSession).count() == 0
    assert len(alerts) == 1
    assert alerts[0]["context"] == "User row removed"
    assert "profile insert failed" in alerts[0]["details"]
    assert COOKIE not in client.cookies


def test_failed_subject_lookup_rolls_back_student_stats(client, db, courses, monkeypatch):
    alerts = []

    def _broken_lookup(*_args, **_kwargs):
        raise RuntimeError("course lookup failed")

    monkeypatch.setattr(accounts, "find_course", _broken_lookup)
    monkeypatch.setattr(accounts, "send_signup_rollback_alert", lambda **kwargs: alerts.append(kwargs))

    response = client.post(
        "/api/signup",
        json=student_signup(subjects=[{"subject_name": "Computer Science", "exam_board": "OCR"}]),
    )

    assert response.status_code == 500
    assert response.json()["detail"] == {"error": "course lookup failed", "rolled_back": True}
    assert db.query(User).count() == 0
    assert db.query(Student).count() == 0
    assert db.query(StudentStats).count() == 0
    assert len(alerts) == 1


def test_failed_user_removal_is_still_alerted_once(monkeypatch):
    alerts = []
    monkeypatch.setattr(accounts, "send_signup_rollback_alert", lambda **kwargs: alerts.append(kwargs))

    class _BrokenDelete:
        def query(self, *_args, **_kwargs):
            raise RuntimeError("delete failed")

        def rollback(self):
            pass

    rolled_back = accounts._rollback_user(_BrokenDelete(), 42, RuntimeError("profile insert failed"))

    assert rolled_back is False
    assert len(alerts) == 1
    assert alerts[0]["user_id"] == 42
    assert alerts[0]["error"] == "delete failed"
    assert alerts[0]["context"] == "User row could not be removed"


def test_alert_delivery_failure_does_not_mask_signup_error(client, db, monkeypatch):
    def _broken_profile(*_args, **_kwargs):
        raise RuntimeError("profile insert failed")

    def _undeliverable(**_kwargs):
        raise RuntimeError("mail down")

    monkeypatch.setattr(accounts, "_create_profile", _broken_profile)
    monkeypatch.setattr(accounts, "send_signup_rollback_alert", _undeliverable)

    response = client.post("/api/signup", json=student_signup())

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to create user profile"
    assert db.query(User).count() == 0


def test_login_failures_are_indistinguishable(client, signup):
    signup(student_signup())
    client.cookies.clear()

    wrong_password = client.post("/api/login", json={"username": "alice", "password": "nope-nope"})
    unknown_user = client.post("/api/login", json={"username": "nobody", "password": "nope-nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"error": "Invalid credentials"}
    assert "set-cookie" not in wrong_password.headers
    assert "set-cookie" not in unknown_user.headers


def test_login_with_corrupted_stored_hash_is_rejected(client, db, signup):
    signup(student_signup())
    client.cookies.clear()
    db.query(User).filter(User.username == "alice").update({"password": "pbkdf2_sha256$1000$a$b"})
    db.commit()

    response = client.post("/api/login", json={"username": "alice", "password": "correct-horse"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}
    assert "set-cookie" not in response.headers


def test_login_invalidates_previous_sessions(client, db, signup):
    first_token = signup(student_signup()).cookies.get(COOKIE)

    response = client.post("/api/login", json={"username": "ALICE", "password": "correct-horse"})
    assert response.status_code == 200
    assert response.json() == {"message": "Logged in"}
    second_token = response.cookies.get(COOKIE)
    assert second_token and second_token != first_token

    user = db.query(User).filter(User.username == "alice").one()
    assert db.query(UserSession).filter(UserSession.user_id == user.user_id).count() == 1
    assert user.last_login is not None

    _use_token(client, first_token)
    assert client.get("/api/user").status_code == 401
    _use_token(client, second_token)
    assert client.get("/api/user").status_code == 200


def test_logout_deletes_session_and_clears_cookie(client, db, signup):
    token = signup(student_signup()).cookies.get(COOKIE)

    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Successfully logged out user"}
    assert "max-age=0" in response.headers["set-cookie"].lower()
    assert db.query(UserSession).count() == 0

    _use_token(client, token)
    assert client.get("/api/user").status_code == 401


def test_logout_without_cookie_still_succeeds(client):
    response = client.post("/api/logout")
    assert response.status_code == 200
    assert "max-age=0" in response.headers["set-cookie"].lower()


def test_expired_session_is_rejected_by_api(client, db, signup):
    signup(student_signup())
    user = db.query(User).one()
    expire_sessions(db, user.user_id)

    response = client.get("/api/user")

    assert response.status_code == 401
    assert response.json() == {"error": "User not signed in"}
    assert db.query(UserSession).count() == 0

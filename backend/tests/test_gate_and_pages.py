from fastapi.testclient import TestClient

from app.core import gate
from app.core.config import settings
from app.core.gate import is_protected_path
from app.models.entities import SchoolClass, User, UserSession

from conftest import expire_sessions, student_signup, teacher_signup

COOKIE = settings.session_cookie_name


def test_protected_path_matching():
    prefixes = ["/dashboard", "/settings"]
    assert is_protected_path("/dashboard", prefixes)
    assert is_protected_path("/settings/profile", prefixes)
    assert not is_protected_path("/login", prefixes)
    assert not is_protected_path("/api/dashboard", prefixes)
    assert not is_protected_path("/dashboard/logo.png", prefixes)
    assert not is_protected_path("/favicon.ico", prefixes)
    assert not is_protected_path("/_next/static/chunk.js", prefixes)


def test_gate_redirects_without_cookie(client):
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/login"

    response = client.get("/settings", follow_redirects=False)
    assert response.status_code == 302


def test_gate_redirects_unknown_token(client):
    client.cookies.set(COOKIE, "made-up-token")
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/login"


def test_gate_clears_expired_session(client, db, signup):
    signup(student_signup())
    user = db.query(User).one()
    expire_sessions(db, user.user_id)

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/login"
    assert f"{COOKIE}=" in response.headers["set-cookie"]
    assert db.query(UserSession).count() == 0


def test_gate_only_checks_protected_paths(client, signup, monkeypatch):
    signup(student_signup())
    calls = []
    original = gate._check_session

    def _counting(session_factory, token):
        calls.append(token)
        return original(session_factory, token)

    monkeypatch.setattr(gate, "_check_session", _counting)

    assert client.get("/api/user").status_code == 200
    assert client.get("/api/meta/health").status_code == 200
    assert client.get("/login", follow_redirects=False).status_code == 302
    assert calls == []

    response = client.get("/dashboard")
    assert response.status_code == 200
    assert len(calls) == 1


def test_api_routes_answer_401_instead_of_redirecting(client):
    response = client.get("/api/user", follow_redirects=False)
    assert response.status_code == 401
    assert response.json() == {"error": "User not signed in"}


def test_public_pages(client, signup):
    assert client.get("/login").json() == {"page": "login"}
    assert client.get("/signup").json() == {"page": "signup"}

    signup(student_signup())
    response = client.get("/login", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/dashboard"


def test_student_dashboard_and_settings(client, signup):
    signup(student_signup())

    dashboard = client.get("/dashboard").json()
    assert dashboard["page"] == "dashboard"
    assert dashboard["user"]["role"] == "Student"
    assert dashboard["tasks"] == 0
    assert dashboard["schoolwork"] == {"completed": 0, "overdue": 0, "due_today": 0, "upcoming": 0}

    page = client.get("/settings").json()
    assert page["user"]["username"] == "alice"
    assert page["progress_emails"] is True
    assert page["year_group"] == "12"


def test_teacher_dashboard_lists_classes(client, signup):
    signup(teacher_signup(classes=["12A"]))
    dashboard = client.get("/dashboard").json()
    assert [c["name"] for c in dashboard["classes"]] == ["12A"]
    assert "progress_emails" not in client.get("/settings").json()


def test_schoolwork_page_is_student_only(client, signup):
    assert client.get("/schoolwork", follow_redirects=False).headers["location"] == "/login"

    signup(teacher_signup())
    response = client.get("/schoolwork", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/dashboard"


def test_class_page_requires_owning_teacher(client, db, signup):
    signup(teacher_signup(classes=["12A"]))
    class_id = db.query(SchoolClass).one().class_id

    page = client.get(f"/classes/{class_id}").json()
    assert page["class"]["name"] == "12A"
    assert page["students"] == []

    other_teacher = TestClient(client.app)
    other_teacher.post("/api/signup", json=teacher_signup("msjones", surname="Jones"))
    response = other_teacher.get(f"/classes/{class_id}", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/dashboard"

    student = TestClient(client.app)
    student.post("/api/signup", json=student_signup())
    response = student.get(f"/classes/{class_id}", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/schoolwork"

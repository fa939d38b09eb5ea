from datetime import datetime, timedelta
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.core.config import settings
from app.core.database import init_db
from app.main import create_app
from app.models.entities import Course, UserSession


@pytest.fixture(autouse=True)
def _fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "password_hash_iterations", 1000)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    app = create_app(session_factory=session_factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def courses(db):
    rows = [
        Course(course_name="Computer Science", exam_board="OCR", qualification="A level", papers="Paper 1; Paper 2", final_year=13),
        Course(course_name="Computer Science", exam_board="AQA", qualification="GCSE", final_year=11),
    ]
    db.add_all(rows)
    db.commit()
    return {(row.exam_board, row.qualification): row.course_id for row in rows}


def student_signup(username="alice", **overrides):
    payload = {
        "role": "Student",
        "username": username,
        "email": f"{username}@example.com",
        "password": "correct-horse",
        "first_name": username.title(),
        "year_group": "12",
        "progress_emails": True,
        "subjects": [],
    }
    payload.update(overrides)
    return payload


def teacher_signup(username="mrsmith", **overrides):
    payload = {
        "role": "Teacher",
        "username": username,
        "email": f"{username}@example.com",
        "password": "correct-horse",
        "first_name": "John",
        "title": "Mr",
        "surname": "Smith",
        "subject": "Computer Science",
        "classes": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def signup(client):
    def _signup(payload):
        response = client.post("/api/signup", json=payload)
        assert response.status_code == 200, response.text
        return response

    return _signup


def expire_sessions(db, user_id):
    db.query(UserSession).filter(UserSession.user_id == user_id).update(
        {"expires": datetime.utcnow() - timedelta(minutes=1)}
    )
    db.commit()

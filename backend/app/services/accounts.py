"""Account creation.

A user row and its role profile (``students`` or ``teachers``) are written in
two steps. When the profile step fails the user row is deleted again so no
account is left without a profile, and the operators are alerted once with
the outcome of that cleanup.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BadRequest, Conflict, Internal
from app.models.entities import Course, SchoolClass, Student, StudentStats, Subject, Teacher, User, UserRole
from app.schemas.api import AuthSignupIn
from app.services.auth import create_join_code, hash_password
from app.services.mailer import send_signup_rollback_alert

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with this email or username already exists."


def qualification_for_year_group(year_group: str | None) -> str | None:
    if year_group in ("10", "11"):
        return "GCSE"
    if year_group in ("12", "13"):
        return "A level"
    return None


def find_course(db: Session, *, subject_name: str, exam_board: str, year_group: str | None) -> Course | None:
    qualification = qualification_for_year_group(year_group)
    if qualification is None:
        return None
    return (
        db.query(Course)
        .filter(Course.course_name == subject_name.strip())
        .filter(Course.exam_board == exam_board.strip())
        .filter(Course.qualification == qualification)
        .first()
    )


def _validate_role_fields(payload: AuthSignupIn) -> None:
    if payload.role == UserRole.student.value and not payload.year_group:
        raise BadRequest("Year group is required for students")
    if payload.role == UserRole.teacher.value and not (payload.title and payload.surname):
        raise BadRequest("Title and surname are required for teachers")


def _create_profile(db: Session, user: User, payload: AuthSignupIn) -> None:
    if payload.role == UserRole.student.value:
        db.add(
            Student(
                user_id=user.user_id,
                year_group=payload.year_group,
                progress_emails=payload.progress_emails,
            )
        )
        db.add(StudentStats(user_id=user.user_id))
        for entry in payload.subjects:
            course = find_course(
                db,
                subject_name=entry.subject_name,
                exam_board=entry.exam_board,
                year_group=payload.year_group,
            )
            if course is None:
                logger.warning(
                    "Skipping unsupported subject %s (%s) for user %s",
                    entry.subject_name,
                    entry.exam_board,
                    user.user_id,
                )
                continue
            db.add(Subject(user_id=user.user_id, course_id=course.course_id))
    else:
        db.add(
            Teacher(
                user_id=user.user_id,
                title=payload.title.strip(),
                surname=payload.surname.strip(),
                subject=payload.subject,
            )
        )
        # Teacher row must exist before classes reference it.
        db.flush()
        for class_name in payload.classes:
            if not class_name or not class_name.strip():
                continue
            db.add(
                SchoolClass(
                    teacher_id=user.user_id,
                    class_name=class_name.strip(),
                    join_code=create_join_code(),
                )
            )
    db.commit()


def _rollback_user(db: Session, user_id: int, original: Exception) -> bool:
    rollback_error: Exception | None = None
    try:
        db.query(User).filter(User.user_id == user_id).delete(synchronize_session=False)
        db.commit()
    except Exception as exc:
        db.rollback()
        rollback_error = exc
        logger.error("Could not remove user %s after failed signup: %s", user_id, exc)

    rolled_back = rollback_error is None
    try:
        send_signup_rollback_alert(
            error=str(rollback_error or original),
            details=f"Profile insert error: {original}; rollback error: {rollback_error or 'none'}",
            user_id=user_id,
            context="User row removed" if rolled_back else "User row could not be removed",
        )
    except Exception:
        logger.exception("Signup rollback alert for user %s was not delivered", user_id)
    return rolled_back


def create_account(db: Session, payload: AuthSignupIn) -> User:
    _validate_role_fields(payload)

    existing = (
        db.query(User.user_id)
        .filter(or_(User.username == payload.username, User.email == payload.email))
        .first()
    )
    if existing:
        raise Conflict(DUPLICATE_USER_MESSAGE)

    user = User(
        username=payload.username,
        email=payload.email,
        password=hash_password(payload.password),
        first_name=payload.first_name.strip(),
        role=payload.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same username or email.
        db.rollback()
        raise Conflict(DUPLICATE_USER_MESSAGE)
    db.refresh(user)
    user_id = user.user_id

    try:
        _create_profile(db, user, payload)
    except Exception as exc:
        db.rollback()
        logger.exception("Profile creation failed for user %s", user_id)
        rolled_back = _rollback_user(db, user_id, exc)
        raise Internal(
            "Failed to create user profile",
            detail={"error": str(exc), "rolled_back": rolled_back},
        )

    db.refresh(user)
    return user

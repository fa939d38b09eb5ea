"""Course catalogue lookups shared by the study routes.

Course pages are addressed by a qualification slug (``gcse`` or ``a-level``),
a course name and an exam board; ``resolve_course`` turns that triple into a
``Course`` row.
"""

from sqlalchemy.orm import Session

from app.core.errors import BadRequest, NotFound
from app.models.entities import Course, Subject

QUALIFICATION_SLUGS = {
    "gcse": "GCSE",
    "a-level": "A level",
}


def qualification_from_slug(slug: str) -> str:
    try:
        return QUALIFICATION_SLUGS[slug]
    except KeyError:
        raise BadRequest("Unknown qualification type")


def resolve_course(db: Session, *, qualification: str | None, subject: str | None, exam_board: str | None) -> Course:
    if not qualification or not subject or not exam_board:
        raise BadRequest("Missing required parameters")

    course = (
        db.query(Course)
        .filter(Course.qualification == qualification_from_slug(qualification))
        .filter(Course.course_name == subject)
        .filter(Course.exam_board == exam_board)
        .first()
    )
    if course is None:
        raise NotFound("Course not found")
    return course


def owned_subject(db: Session, subject_id: int, user_id: int) -> Subject:
    subject = (
        db.query(Subject)
        .filter(Subject.subject_id == subject_id, Subject.user_id == user_id)
        .one_or_none()
    )
    if subject is None:
        raise NotFound("Subject not found")
    return subject


def subject_for_course(db: Session, course_id: int, user_id: int) -> Subject:
    subject = (
        db.query(Subject)
        .filter(Subject.course_id == course_id, Subject.user_id == user_id)
        .order_by(Subject.subject_id.asc())
        .first()
    )
    if subject is None:
        raise NotFound("Subject not found")
    return subject

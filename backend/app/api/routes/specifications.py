import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_student
from app.core.errors import BadRequest, NotFound
from app.models.entities import Course, SpecificationEntry, SpecificationSubjectLink, Subject
from app.schemas.api import EditSubjectLinkIn
from app.services.auth import Identity
from app.services.courses import resolve_course, subject_for_course

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/specifications")

LINK_EDIT_TYPES = ("confidence", "sessions")


@router.get("/get_specification_data")
def get_specification_data(
    qualification: str | None = None,
    subject: str | None = None,
    exam_board: str | None = Query(None, alias="examBoard"),
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    course = resolve_course(db, qualification=qualification, subject=subject, exam_board=exam_board)
    student_subject = subject_for_course(db, course.course_id, identity.user_id)

    rows = (
        db.query(SpecificationEntry, SpecificationSubjectLink)
        .outerjoin(
            SpecificationSubjectLink,
            (SpecificationSubjectLink.entry_id == SpecificationEntry.entry_id)
            & (SpecificationSubjectLink.subject_id == student_subject.subject_id),
        )
        .filter(SpecificationEntry.course_id == course.course_id)
        .order_by(SpecificationEntry.entry_id.asc())
        .all()
    )
    return {
        "specificationEntries": [
            {
                "id": entry.entry_id,
                "topic": entry.topic,
                "topic_name": entry.topic_name,
                "description": entry.description,
                "paper": entry.paper,
                "common": bool(entry.common),
                "difficult": bool(entry.difficult),
                "confidence": link.confidence if link else 0,
                "sessions": link.sessions if link else 0,
            }
            for entry, link in rows
        ]
    }


@router.post("/edit_subject_link")
def edit_subject_link(
    payload: EditSubjectLinkIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    if not payload.course_name or not payload.exam_board:
        raise BadRequest("Missing required parameters")
    if payload.type not in LINK_EDIT_TYPES:
        raise BadRequest("Invalid request type")
    if payload.type == "confidence" and payload.detail is None:
        raise BadRequest("Confidence value is required")

    student_subject = (
        db.query(Subject)
        .join(Course, Course.course_id == Subject.course_id)
        .filter(Subject.user_id == identity.user_id)
        .filter(Course.course_name == payload.course_name)
        .filter(Course.exam_board == payload.exam_board)
        .order_by(Subject.subject_id.asc())
        .first()
    )
    if student_subject is None:
        raise NotFound("Subject not found")

    entry = (
        db.query(SpecificationEntry)
        .filter(SpecificationEntry.entry_id == payload.entry_id)
        .filter(SpecificationEntry.course_id == student_subject.course_id)
        .one_or_none()
    )
    if entry is None:
        raise NotFound("Specification entry not found")

    link_filter = (
        SpecificationSubjectLink.entry_id == entry.entry_id,
        SpecificationSubjectLink.subject_id == student_subject.subject_id,
    )
    link = db.query(SpecificationSubjectLink).filter(*link_filter).one_or_none()
    if link is None:
        link = SpecificationSubjectLink(
            entry_id=entry.entry_id,
            subject_id=student_subject.subject_id,
            confidence=0,
            sessions=0,
        )
        db.add(link)
        db.flush()

    if payload.type == "confidence":
        link.confidence = payload.detail
    else:
        db.query(SpecificationSubjectLink).filter(*link_filter).update(
            {SpecificationSubjectLink.sessions: SpecificationSubjectLink.sessions + 1},
            synchronize_session=False,
        )
    db.commit()
    logger.info("Subject %s %s updated for specification entry %s", student_subject.subject_id, payload.type, entry.entry_id)
    return {"message": "Successfully amended data"}

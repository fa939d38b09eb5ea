from collections import defaultdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_student
from app.core.errors import Conflict, NotFound
from app.models.entities import Course, ExamDate, Student, Subject
from app.schemas.api import AddSubjectIn, RemoveSubjectIn
from app.services.accounts import find_course
from app.services.auth import Identity
from app.services.dates import iso_z

router = APIRouter(prefix="/subjects")


def _student_subjects(db: Session, user_id: int) -> list[tuple[Subject, Course]]:
    return (
        db.query(Subject, Course)
        .join(Course, Course.course_id == Subject.course_id)
        .filter(Subject.user_id == user_id)
        .order_by(Subject.subject_id.asc())
        .all()
    )


@router.post("/add_subject")
def add_subject(
    payload: AddSubjectIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    student = db.query(Student).filter(Student.user_id == identity.user_id).one_or_none()
    if student is None:
        raise NotFound("Student profile not found")

    course = find_course(
        db,
        subject_name=payload.subject_name,
        exam_board=payload.exam_board,
        year_group=student.year_group,
    )
    if course is None:
        raise NotFound("This subject and exam board pair is not yet supported by Pack")

    already = (
        db.query(Subject.subject_id)
        .filter(Subject.user_id == identity.user_id, Subject.course_id == course.course_id)
        .first()
    )
    if already:
        raise Conflict("Subject already added")

    db.add(Subject(user_id=identity.user_id, course_id=course.course_id))
    db.commit()
    return {"message": "Subject added and successfully linked to course."}


@router.get("/get_subjects")
def get_subjects(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    rows = _student_subjects(db, identity.user_id)
    if not rows:
        return {"subjects": [], "message": "No subjects found"}
    return {"subjects": [{"id": subject.subject_id, "name": course.course_name} for subject, course in rows]}


@router.get("/get_subjects_full")
def get_subjects_full(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    rows = _student_subjects(db, identity.user_id)
    if not rows:
        return {"subjects": [], "message": "No subjects found"}

    course_ids = [course.course_id for _, course in rows]
    exam_dates = defaultdict(list)
    for exam in (
        db.query(ExamDate)
        .filter(ExamDate.course_id.in_(course_ids))
        .order_by(ExamDate.exam_date.asc())
        .all()
    ):
        exam_dates[exam.course_id].append({"examDate": iso_z(exam.exam_date), "type": exam.type})

    return {
        "subjects": [
            {
                "id": subject.subject_id,
                "name": course.course_name,
                "description": course.course_description or "",
                "examBoard": course.exam_board,
                "papers": course.papers or "",
                "examDates": exam_dates.get(course.course_id, []),
            }
            for subject, course in rows
        ]
    }


@router.post("/remove_subject")
def remove_subject(
    payload: RemoveSubjectIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    (
        db.query(Subject)
        .filter(Subject.subject_id == payload.subject_id, Subject.user_id == identity.user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"message": f"Successfully deleted subject {payload.subject_id} from the DB"}

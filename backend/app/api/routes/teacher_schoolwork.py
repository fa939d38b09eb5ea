import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_teacher
from app.core.errors import BadRequest, Forbidden, NotFound
from app.models.entities import ClassSchoolwork, SchoolClass, SchoolworkStudentLink, User
from app.schemas.api import AddClassIn, ClassRefIn, DeleteTeacherSchoolworkIn, TeacherSchoolworkEntryIn
from app.services.auth import Identity, create_join_code
from app.services.dates import as_utc_naive, is_past, iso_z, utcnow
from app.services.schoolwork import (
    class_student_ids,
    completion_ratio,
    parse_schoolwork_type,
    teacher_class_summaries,
    type_label,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teacher_schoolwork")


def owned_class(db: Session, class_id: int, teacher_id: int, *, action: str) -> SchoolClass:
    school_class = db.query(SchoolClass).filter(SchoolClass.class_id == class_id).one_or_none()
    if school_class is None:
        raise NotFound("Class not found")
    if school_class.teacher_id != teacher_id:
        raise Forbidden(f"User not authorised to {action} this class")
    return school_class


@router.post("/add_class")
def add_class(
    payload: AddClassIn,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    class_name = payload.class_name.strip()
    if not class_name:
        raise BadRequest("Empty class name")

    school_class = SchoolClass(teacher_id=identity.user_id, class_name=class_name, join_code=create_join_code())
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return {
        "message": "Successfully added class to teacher's profile",
        "class": {
            "id": school_class.class_id,
            "name": school_class.class_name,
            "join_code": school_class.join_code,
        },
    }


@router.get("/get_classes")
def get_teacher_classes(
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    return {"classes": teacher_class_summaries(db, identity.user_id)}


@router.post("/reset_join_code")
def reset_join_code(
    payload: ClassRefIn,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    school_class = owned_class(db, payload.class_id, identity.user_id, action="reset the join code of")
    school_class.join_code = create_join_code()
    db.commit()
    return {"message": "Successfully reset join code", "new_code": school_class.join_code}


@router.post("/add_schoolwork_entry")
def add_class_schoolwork(
    payload: TeacherSchoolworkEntryIn,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    owned_class(db, payload.class_id, identity.user_id, action="add entries to")
    if not payload.schoolwork_name.strip() or not payload.type or payload.due is None:
        raise BadRequest("Name, type, due date, issued date, and class ID are required")
    if is_past(payload.due):
        raise BadRequest("Due date cannot be in the past")
    type_code = parse_schoolwork_type(payload.type)

    entry = ClassSchoolwork(
        class_id=payload.class_id,
        course_id=payload.course_id,
        type=type_code,
        due=as_utc_naive(payload.due),
        issued=as_utc_naive(payload.issued) or utcnow(),
        schoolwork_name=payload.schoolwork_name.strip(),
        schoolwork_description=payload.schoolwork_description or None,
    )
    db.add(entry)
    db.flush()

    student_ids = class_student_ids(db, payload.class_id)
    db.add_all(
        SchoolworkStudentLink(class_schoolwork_id=entry.class_schoolwork_id, student_id=student_id, completed=False)
        for student_id in student_ids
    )
    db.commit()
    db.refresh(entry)
    logger.info("Class %s received schoolwork %s for %d students", payload.class_id, entry.class_schoolwork_id, len(student_ids))

    return {
        "entry": {
            "id": entry.class_schoolwork_id,
            "course_id": entry.course_id,
            "schoolworkType": type_label(entry.type),
            "due": iso_z(entry.due),
            "issued": iso_z(entry.issued),
            "name": entry.schoolwork_name,
            "description": entry.schoolwork_description,
            "completed": completion_ratio(0, len(student_ids)),
        },
        "message": "Schoolwork entry successfully added",
    }


@router.post("/delete_schoolwork_entry")
def delete_class_schoolwork(
    payload: DeleteTeacherSchoolworkIn,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    owned_class(db, payload.class_id, identity.user_id, action="delete entries from")
    entry = (
        db.query(ClassSchoolwork)
        .filter(ClassSchoolwork.class_schoolwork_id == payload.entry_id, ClassSchoolwork.class_id == payload.class_id)
        .one_or_none()
    )
    if entry is None:
        raise NotFound("Schoolwork entry not found")

    (
        db.query(SchoolworkStudentLink)
        .filter(SchoolworkStudentLink.class_schoolwork_id == entry.class_schoolwork_id)
        .delete(synchronize_session=False)
    )
    db.delete(entry)
    db.commit()
    return {"message": f"Successfully deleted schoolwork entry {payload.entry_id} from the DB"}


@router.get("/get_student_submissions")
def get_student_submissions(
    schoolwork_id: int,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    entry = db.query(ClassSchoolwork).filter(ClassSchoolwork.class_schoolwork_id == schoolwork_id).one_or_none()
    if entry is None:
        raise NotFound("Schoolwork entry not found")
    owned_class(db, entry.class_id, identity.user_id, action="view submissions for")

    rows = (
        db.query(User.user_id, User.first_name, SchoolworkStudentLink.completed)
        .join(SchoolworkStudentLink, SchoolworkStudentLink.student_id == User.user_id)
        .filter(SchoolworkStudentLink.class_schoolwork_id == schoolwork_id)
        .order_by(User.first_name.asc())
        .all()
    )
    completed, incomplete = [], []
    for user_id, first_name, done in rows:
        (completed if done else incomplete).append({"student_id": str(user_id), "name": first_name})
    return {
        "incompleteStudents": incomplete,
        "completedStudents": completed,
        "completed": completion_ratio(len(completed), len(rows)),
    }

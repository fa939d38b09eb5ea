from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_student
from app.core.errors import BadRequest, Conflict, NotFound
from app.models.entities import (
    ClassSchoolwork,
    ClassStudentLink,
    Course,
    SchoolClass,
    Schoolwork,
    SchoolworkStudentLink,
    Subject,
    Teacher,
)
from app.schemas.api import ClassRefIn, CompleteSchoolworkIn, DeleteSchoolworkIn, JoinClassIn, SchoolworkEntryIn
from app.services.auth import Identity
from app.services.dates import as_utc_naive, is_past
from app.services.schoolwork import (
    CLASS_CATEGORY,
    STUDENT_CATEGORY,
    categorize_by_due_date,
    collect_student_schoolwork,
    link_student_to_class_work,
    parse_schoolwork_type,
    serialize_student_entry,
    sort_by_due_date,
)

router = APIRouter(prefix="/schoolwork")


@router.get("/get_schoolwork_data")
def get_schoolwork_data(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    entries = sort_by_due_date(collect_student_schoolwork(db, identity.user_id))
    buckets = categorize_by_due_date(entries)
    return {
        "schoolwork": entries,
        "summary": {name: len(items) for name, items in buckets.items()},
    }


@router.post("/add_schoolwork_entry")
def add_schoolwork_entry(
    payload: SchoolworkEntryIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    if not payload.schoolwork_name.strip() or not payload.type or payload.due is None or payload.issued is None:
        raise BadRequest("Missing required fields")
    if is_past(payload.due):
        raise BadRequest("Due date cannot be in the past")
    type_code = parse_schoolwork_type(payload.type)

    course_name = None
    if payload.subject_id is not None:
        row = (
            db.query(Subject, Course.course_name)
            .join(Course, Course.course_id == Subject.course_id)
            .filter(Subject.subject_id == payload.subject_id, Subject.user_id == identity.user_id)
            .one_or_none()
        )
        if row is None:
            raise NotFound("Subject not found")
        course_name = row[1]

    entry = Schoolwork(
        user_id=identity.user_id,
        type=type_code,
        completed=False,
        due=as_utc_naive(payload.due),
        issued=as_utc_naive(payload.issued),
        schoolwork_name=payload.schoolwork_name.strip(),
        schoolwork_description=payload.schoolwork_description or None,
        subject_id=payload.subject_id,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return {
        "schoolwork": serialize_student_entry(entry, course_name),
        "message": "Schoolwork entry successfully added",
    }


@router.post("/complete_schoolwork_entry")
def complete_schoolwork_entry(
    payload: CompleteSchoolworkIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    if payload.category == STUDENT_CATEGORY:
        updated = (
            db.query(Schoolwork)
            .filter(Schoolwork.schoolwork_id == payload.schoolwork_id, Schoolwork.user_id == identity.user_id)
            .update({"completed": payload.complete}, synchronize_session=False)
        )
    elif payload.category == CLASS_CATEGORY:
        updated = (
            db.query(SchoolworkStudentLink)
            .filter(
                SchoolworkStudentLink.class_schoolwork_id == payload.schoolwork_id,
                SchoolworkStudentLink.student_id == identity.user_id,
            )
            .update({"completed": payload.complete}, synchronize_session=False)
        )
    else:
        raise BadRequest("Invalid category")

    db.commit()
    if not updated:
        raise NotFound("Schoolwork entry not found")
    return {
        "message": f"Successfully updated schoolwork status ({payload.schoolwork_id} - {payload.category})",
    }


@router.post("/delete_schoolwork_entry")
def delete_schoolwork_entry(
    payload: DeleteSchoolworkIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    (
        db.query(Schoolwork)
        .filter(Schoolwork.schoolwork_id == payload.schoolwork_id, Schoolwork.user_id == identity.user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"message": f"Successfully deleted schoolwork entry {payload.schoolwork_id} from the DB"}


@router.get("/get_classes")
def get_classes(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(SchoolClass, Teacher)
        .join(ClassStudentLink, ClassStudentLink.class_id == SchoolClass.class_id)
        .outerjoin(Teacher, Teacher.user_id == SchoolClass.teacher_id)
        .filter(ClassStudentLink.student_id == identity.user_id)
        .order_by(SchoolClass.class_name.asc())
        .all()
    )
    classes = [
        {
            "id": school_class.class_id,
            "name": school_class.class_name,
            "teacher": teacher.display_name if teacher else None,
        }
        for school_class, teacher in rows
    ]
    if not classes:
        return {"classes": [], "message": "No classes found"}
    return {"classes": classes}


@router.post("/join_class")
def join_class(
    payload: JoinClassIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    join_code = payload.join_code.strip()
    if not join_code:
        raise BadRequest("Empty join code")

    school_class = db.query(SchoolClass).filter(SchoolClass.join_code == join_code).one_or_none()
    if school_class is None:
        raise NotFound("No class found for this join code")

    already = (
        db.query(ClassStudentLink)
        .filter(
            ClassStudentLink.class_id == school_class.class_id,
            ClassStudentLink.student_id == identity.user_id,
        )
        .one_or_none()
    )
    if already:
        raise Conflict("Already a member of this class")

    db.add(ClassStudentLink(class_id=school_class.class_id, student_id=identity.user_id))
    link_student_to_class_work(db, school_class.class_id, identity.user_id)
    db.commit()
    return {"message": "Successfully added student to class", "class_id": school_class.class_id}


@router.post("/leave_class")
def leave_class(
    payload: ClassRefIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    work_ids = [
        row.class_schoolwork_id
        for row in db.query(ClassSchoolwork.class_schoolwork_id)
        .filter(ClassSchoolwork.class_id == payload.class_id)
        .all()
    ]
    if work_ids:
        (
            db.query(SchoolworkStudentLink)
            .filter(
                SchoolworkStudentLink.student_id == identity.user_id,
                SchoolworkStudentLink.class_schoolwork_id.in_(work_ids),
            )
            .delete(synchronize_session=False)
        )
    (
        db.query(ClassStudentLink)
        .filter(ClassStudentLink.class_id == payload.class_id, ClassStudentLink.student_id == identity.user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"message": f"Successfully removed student from class {payload.class_id}"}

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import BadRequest
from app.models.entities import (
    ClassSchoolwork,
    ClassStudentLink,
    Course,
    SchoolClass,
    Schoolwork,
    SchoolworkStudentLink,
    SchoolworkType,
    Subject,
    Teacher,
)
from app.services.dates import as_utc_naive, iso_z, utcnow

# Entries a student created themselves vs. entries set by a teacher for a class.
STUDENT_CATEGORY = 1
CLASS_CATEGORY = 2

TYPE_LABELS = {
    SchoolworkType.homework.value: "Homework",
    SchoolworkType.test.value: "Test",
}


def parse_schoolwork_type(label: str) -> int:
    for code, name in TYPE_LABELS.items():
        if name == label:
            return code
    raise BadRequest("Invalid schoolwork type")


def type_label(code: int | None) -> str:
    return TYPE_LABELS.get(code, "Test")


def serialize_student_entry(entry: Schoolwork, course_name: str | None = None) -> dict:
    subject = entry.subject
    return {
        "id": str(entry.schoolwork_id),
        "category": STUDENT_CATEGORY,
        "schoolworkType": type_label(entry.type),
        "completed": bool(entry.completed),
        "due": iso_z(entry.due),
        "issued": iso_z(entry.issued),
        "name": entry.schoolwork_name,
        "description": entry.schoolwork_description,
        "class_name": None,
        "teacher_name": subject.teacher_name if subject else None,
        "subject_name": course_name,
    }


def serialize_class_entry(
    entry: ClassSchoolwork,
    school_class: SchoolClass,
    teacher: Teacher | None,
    completed: bool,
) -> dict:
    return {
        "id": str(entry.class_schoolwork_id),
        "category": CLASS_CATEGORY,
        "schoolworkType": type_label(entry.type),
        "completed": bool(completed),
        "due": iso_z(entry.due),
        "issued": iso_z(entry.issued),
        "name": entry.schoolwork_name,
        "description": entry.schoolwork_description,
        "class_name": school_class.class_name,
        "teacher_name": teacher.display_name if teacher else None,
        "subject_name": teacher.subject if teacher else None,
    }


def collect_student_schoolwork(db: Session, student_id: int) -> list[dict]:
    own = (
        db.query(Schoolwork, Course.course_name)
        .outerjoin(Subject, Subject.subject_id == Schoolwork.subject_id)
        .outerjoin(Course, Course.course_id == Subject.course_id)
        .filter(Schoolwork.user_id == student_id)
        .all()
    )
    assigned = (
        db.query(ClassSchoolwork, SchoolClass, Teacher, SchoolworkStudentLink.completed)
        .join(
            SchoolworkStudentLink,
            SchoolworkStudentLink.class_schoolwork_id == ClassSchoolwork.class_schoolwork_id,
        )
        .join(SchoolClass, SchoolClass.class_id == ClassSchoolwork.class_id)
        .outerjoin(Teacher, Teacher.user_id == SchoolClass.teacher_id)
        .filter(SchoolworkStudentLink.student_id == student_id)
        .all()
    )
    entries = [serialize_student_entry(entry, course_name) for entry, course_name in own]
    entries.extend(
        serialize_class_entry(entry, school_class, teacher, completed)
        for entry, school_class, teacher, completed in assigned
    )
    return entries


def _due_of(entry: dict) -> datetime:
    return datetime.fromisoformat(entry["due"].rstrip("Z")) if entry.get("due") else datetime.max


def sort_by_due_date(entries: list[dict]) -> list[dict]:
    return sorted(entries, key=lambda entry: (_due_of(entry), entry["name"] or ""))


def categorize_by_due_date(entries: list[dict], *, now: datetime | None = None) -> dict[str, list[dict]]:
    """Group entries into completed, overdue, due today and upcoming buckets."""
    current = as_utc_naive(now) or utcnow()
    start_of_tomorrow = datetime(current.year, current.month, current.day) + timedelta(days=1)
    buckets: dict[str, list[dict]] = {"completed": [], "overdue": [], "due_today": [], "upcoming": []}
    for entry in sort_by_due_date(entries):
        due = _due_of(entry)
        if entry.get("completed"):
            buckets["completed"].append(entry)
        elif due < current:
            buckets["overdue"].append(entry)
        elif due < start_of_tomorrow:
            buckets["due_today"].append(entry)
        else:
            buckets["upcoming"].append(entry)
    return buckets


def completion_ratio(completed: int, total: int) -> str:
    return f"{completed}/{total}"


def link_student_to_class_work(db: Session, class_id: int, student_id: int) -> int:
    """Create missing completion rows for every piece of work already set for the class."""
    existing = {
        row.class_schoolwork_id
        for row in db.query(SchoolworkStudentLink.class_schoolwork_id)
        .join(ClassSchoolwork, ClassSchoolwork.class_schoolwork_id == SchoolworkStudentLink.class_schoolwork_id)
        .filter(ClassSchoolwork.class_id == class_id, SchoolworkStudentLink.student_id == student_id)
        .all()
    }
    work_ids = [
        row.class_schoolwork_id
        for row in db.query(ClassSchoolwork.class_schoolwork_id).filter(ClassSchoolwork.class_id == class_id).all()
    ]
    created = 0
    for work_id in work_ids:
        if work_id in existing:
            continue
        db.add(SchoolworkStudentLink(class_schoolwork_id=work_id, student_id=student_id, completed=False))
        created += 1
    return created


def class_student_ids(db: Session, class_id: int) -> list[int]:
    return [
        row.student_id
        for row in db.query(ClassStudentLink.student_id).filter(ClassStudentLink.class_id == class_id).all()
    ]


def teacher_class_summaries(db: Session, teacher_id: int) -> list[dict]:
    rows = (
        db.query(SchoolClass, func.count(ClassStudentLink.student_id))
        .outerjoin(ClassStudentLink, ClassStudentLink.class_id == SchoolClass.class_id)
        .filter(SchoolClass.teacher_id == teacher_id)
        .group_by(SchoolClass.class_id)
        .order_by(SchoolClass.class_name.asc())
        .all()
    )
    return [
        {
            "id": school_class.class_id,
            "name": school_class.class_name,
            "join_code": school_class.join_code,
            "student_count": student_count,
        }
        for school_class, student_count in rows
    ]

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_optional_user, page_redirect
from app.models.entities import ClassSchoolwork, ClassStudentLink, SchoolClass, SchoolworkStudentLink, Student, Task, User
from app.services.auth import Identity, any_role, is_student, is_teacher, landing_page_for
from app.services.dates import iso_z
from app.services.schoolwork import (
    categorize_by_due_date,
    collect_student_schoolwork,
    completion_ratio,
    sort_by_due_date,
    teacher_class_summaries,
    type_label,
)

router = APIRouter()


def _public_page(identity: Identity | None, page: str):
    if identity is not None:
        return RedirectResponse(url=landing_page_for(identity), status_code=302)
    return {"page": page}


@router.get("/login")
def login_page(identity: Identity | None = Depends(get_optional_user)):
    return _public_page(identity, "login")


@router.get("/signup")
def signup_page(identity: Identity | None = Depends(get_optional_user)):
    return _public_page(identity, "signup")


@router.get("/dashboard")
def dashboard_page(
    identity: Identity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    redirect = page_redirect(identity, any_role)
    if redirect is not None:
        return redirect

    context = {"page": "dashboard", "user": {"first_name": identity.first_name, "role": identity.role}}
    if is_teacher(identity):
        context["classes"] = teacher_class_summaries(db, identity.user_id)
        return context

    buckets = categorize_by_due_date(collect_student_schoolwork(db, identity.user_id))
    context["tasks"] = db.query(func.count(Task.task_id)).filter(Task.user_id == identity.user_id).scalar() or 0
    context["schoolwork"] = {name: len(items) for name, items in buckets.items()}
    return context


@router.get("/settings")
def settings_page(
    identity: Identity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    redirect = page_redirect(identity, any_role)
    if redirect is not None:
        return redirect

    context = {
        "page": "settings",
        "user": {
            "username": identity.username,
            "email": identity.email,
            "first_name": identity.first_name,
            "role": identity.role,
        },
    }
    if is_student(identity):
        student = db.query(Student).filter(Student.user_id == identity.user_id).one_or_none()
        context["progress_emails"] = bool(student.progress_emails) if student else False
        context["year_group"] = student.year_group if student else None
    return context


@router.get("/schoolwork")
def schoolwork_page(
    identity: Identity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    redirect = page_redirect(identity, is_student, fallback="/dashboard")
    if redirect is not None:
        return redirect

    entries = sort_by_due_date(collect_student_schoolwork(db, identity.user_id))
    return {"page": "schoolwork", "schoolwork": categorize_by_due_date(entries)}


@router.get("/classes/{class_id}")
def class_page(
    class_id: int,
    identity: Identity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    redirect = page_redirect(identity, is_teacher, fallback="/schoolwork")
    if redirect is not None:
        return redirect

    school_class = db.query(SchoolClass).filter(SchoolClass.class_id == class_id).one_or_none()
    if school_class is None or school_class.teacher_id != identity.user_id:
        return RedirectResponse(url="/dashboard", status_code=302)

    students = (
        db.query(User.user_id, User.first_name)
        .join(ClassStudentLink, ClassStudentLink.student_id == User.user_id)
        .filter(ClassStudentLink.class_id == class_id)
        .order_by(User.first_name.asc())
        .all()
    )
    entries = (
        db.query(ClassSchoolwork)
        .filter(ClassSchoolwork.class_id == class_id)
        .order_by(ClassSchoolwork.due.asc())
        .all()
    )
    schoolwork = []
    for entry in entries:
        links = (
            db.query(SchoolworkStudentLink.completed)
            .filter(SchoolworkStudentLink.class_schoolwork_id == entry.class_schoolwork_id)
            .all()
        )
        done = sum(1 for link in links if link.completed)
        schoolwork.append(
            {
                "id": entry.class_schoolwork_id,
                "name": entry.schoolwork_name,
                "description": entry.schoolwork_description,
                "schoolworkType": type_label(entry.type),
                "due": iso_z(entry.due),
                "issued": iso_z(entry.issued),
                "completed": completion_ratio(done, len(links)),
            }
        )

    return {
        "page": "class",
        "class": {
            "id": school_class.class_id,
            "name": school_class.class_name,
            "join_code": school_class.join_code,
        },
        "students": [{"student_id": str(user_id), "name": first_name} for user_id, first_name in students],
        "schoolwork": schoolwork,
    }

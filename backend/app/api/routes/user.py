import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_student, require_teacher
from app.core.errors import BadRequest, Conflict, NotAuthenticated, NotFound
from app.models.entities import Notification, Student, User
from app.schemas.api import (
    MarkNotificationsIn,
    OkOut,
    SendNotificationIn,
    SetEmailIn,
    SetPasswordIn,
    SetProgressEmailsIn,
    UserOut,
)
from app.services.auth import Identity, hash_password, verify_password
from app.services.dates import iso_z

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user")

PROGRESS_EMAIL_STATES = {"Enabled": True, "Disabled": False}


def _serialize_notification(notification: Notification) -> dict:
    return {
        "id": str(notification.notification_id),
        "message": notification.message,
        "sent": iso_z(notification.time_sent),
        "read": notification.read,
    }


@router.get("", response_model=UserOut)
def current_user(identity: Identity = Depends(get_current_user)):
    return {
        "user_id": identity.user_id,
        "username": identity.username,
        "email": identity.email,
        "first_name": identity.first_name,
        "role": identity.role,
    }


@router.post("/settings/set_email", response_model=OkOut)
def set_email(
    payload: SetEmailIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    new_email = payload.new_email.strip().lower()
    taken = (
        db.query(User.user_id)
        .filter(User.email == new_email)
        .filter(User.user_id != identity.user_id)
        .first()
    )
    if taken:
        raise Conflict("Email is already in use")

    db.query(User).filter(User.user_id == identity.user_id).update({"email": new_email})
    db.commit()
    return {"ok": True}


@router.post("/settings/set_password", response_model=OkOut)
def set_password(
    payload: SetPasswordIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.user_id == identity.user_id).one_or_none()
    if user is None:
        raise NotAuthenticated()
    if not verify_password(payload.old_password, user.password):
        raise NotAuthenticated("Current password is incorrect.")

    user.password = hash_password(payload.new_password)
    db.commit()
    return {"ok": True}


@router.post("/settings/set_progress_emails", response_model=OkOut)
def set_progress_emails(
    payload: SetProgressEmailsIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    if payload.new_state not in PROGRESS_EMAIL_STATES:
        raise BadRequest("new_state must be Enabled or Disabled")

    updated = (
        db.query(Student)
        .filter(Student.user_id == identity.user_id)
        .update({"progress_emails": PROGRESS_EMAIL_STATES[payload.new_state]})
    )
    db.commit()
    if not updated:
        raise NotFound("Student profile not found")
    return {"ok": True}


@router.get("/student/get_year_group")
def get_year_group(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    student = db.query(Student).filter(Student.user_id == identity.user_id).one_or_none()
    if student is None:
        raise NotFound("Student profile not found")
    return {"yearGroup": student.year_group}


@router.get("/notifications/get_notifications")
def get_notifications(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == identity.user_id)
        .order_by(Notification.time_sent.desc(), Notification.notification_id.desc())
        .all()
    )
    return {
        "newNotifications": [_serialize_notification(n) for n in notifications if not n.read],
        "readNotifications": [_serialize_notification(n) for n in notifications if n.read],
    }


@router.post("/notifications/mark_as_read")
def mark_as_read(
    payload: MarkNotificationsIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payload.notification_ids:
        raise BadRequest("Missing required parameters")

    (
        db.query(Notification)
        .filter(Notification.user_id == identity.user_id)
        .filter(Notification.notification_id.in_(payload.notification_ids))
        .update({"read": True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "Successfully amended notification data"}


@router.post("/notifications/send_notification")
def send_notification(
    payload: SendNotificationIn,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    if not payload.message.strip():
        raise BadRequest("Recipients and message are required")
    if not payload.recipients:
        raise BadRequest("Recipients must be a populated array")

    recipients = sorted(set(payload.recipients))
    known = {row.user_id for row in db.query(User.user_id).filter(User.user_id.in_(recipients)).all()}
    missing = [user_id for user_id in recipients if user_id not in known]
    if missing:
        raise NotFound("Unknown recipients", detail={"recipients": missing})

    db.add_all(Notification(user_id=user_id, message=payload.message.strip()) for user_id in recipients)
    db.commit()
    logger.info("User %s sent a notification to %d recipients", identity.user_id, len(recipients))
    return {"message": "Notification successfully sent"}

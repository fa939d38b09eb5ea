from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.errors import BadRequest
from app.models.entities import CalendarEvent, LocationType
from app.schemas.api import CalendarEventIn
from app.services.auth import Identity
from app.services.courses import owned_subject
from app.services.dates import as_utc_naive, iso_z

router = APIRouter(prefix="/calendar")

LOCATION_LABELS = {
    LocationType.in_person.value: "In-person",
    LocationType.online.value: "Online",
}


def _serialize_event(event: CalendarEvent) -> dict:
    return {
        "id": event.event_id,
        "name": event.event_name,
        "description": event.event_description or None,
        "start": iso_z(event.event_start),
        "end": iso_z(event.event_end),
        "type": event.type or "Other",
        "subject_id": event.subject_id or None,
        "location_type": LOCATION_LABELS.get(event.location_type),
        "location": event.location or None,
    }


@router.get("/get_events")
def get_events(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    events = (
        db.query(CalendarEvent)
        .filter(CalendarEvent.user_id == identity.user_id)
        .order_by(CalendarEvent.event_start.asc())
        .all()
    )
    if not events:
        return {"userRole": identity.role, "events": [], "message": "No calendar events found"}
    return {"userRole": identity.role, "events": [_serialize_event(event) for event in events]}


@router.post("/add_event")
def add_event(
    payload: CalendarEventIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payload.name.strip() or payload.start is None or payload.end is None or payload.location_type is None:
        raise BadRequest("Name, start, end, and locationType are required")

    start = as_utc_naive(payload.start)
    end = as_utc_naive(payload.end)
    if end < start:
        raise BadRequest("Event cannot end before it starts")
    if payload.subject_id is not None:
        owned_subject(db, payload.subject_id, identity.user_id)

    event = CalendarEvent(
        user_id=identity.user_id,
        event_name=payload.name.strip(),
        event_description=payload.description or None,
        event_start=start,
        event_end=end,
        type=payload.type or None,
        subject_id=payload.subject_id,
        location_type=payload.location_type or 0,
        location=payload.location or None,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return {"event": _serialize_event(event), "message": "Event successfully added"}

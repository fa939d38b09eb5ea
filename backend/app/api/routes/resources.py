from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.entities import CourseResourceLink, Resource, SpecificationEntry
from app.services.auth import Identity
from app.services.courses import resolve_course
from app.services.dates import iso_z

router = APIRouter(prefix="/resources")


@router.get("/get_resource_data")
def get_resource_data(
    qualification: str | None = None,
    subject: str | None = None,
    exam_board: str | None = Query(None, alias="examBoard"),
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    course = resolve_course(db, qualification=qualification, subject=subject, exam_board=exam_board)
    rows = (
        db.query(Resource, SpecificationEntry)
        .select_from(Resource)
        .join(CourseResourceLink, CourseResourceLink.resource_id == Resource.resource_id)
        .outerjoin(SpecificationEntry, SpecificationEntry.entry_id == CourseResourceLink.specification_entry_id)
        .filter(CourseResourceLink.course_id == course.course_id)
        .order_by(Resource.uploaded_at.desc(), Resource.resource_id.asc())
        .all()
    )
    entries = []
    for resource, entry in rows:
        entries.append(
            {
                "id": resource.resource_id,
                "resource_name": resource.resource_name,
                "resource_description": resource.resource_description or "",
                "location": resource.location,
                "topic": entry.topic if entry else None,
                "paper": entry.paper if entry else None,
                "uploaded_at": iso_z(resource.uploaded_at),
                "type": resource.type,
                "creator": resource.creator,
                "commonTopic": bool(entry.common) if entry else False,
                "difficultTopic": bool(entry.difficult) if entry else False,
            }
        )
    return {"resourceEntries": entries}

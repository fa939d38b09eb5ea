from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_student
from app.core.errors import BadRequest, NotFound
from app.models.entities import StudentStats
from app.schemas.api import SaveStatsIn
from app.services.auth import Identity

router = APIRouter(prefix="/user_stats")


def _stats_for(db: Session, user_id: int) -> StudentStats:
    stats = db.query(StudentStats).filter(StudentStats.user_id == user_id).one_or_none()
    if stats is None:
        raise NotFound("Student stats not found")
    return stats


@router.get("/get_stats")
def get_stats(
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    stats = _stats_for(db, identity.user_id)
    return {
        "message": "Successfully returned data",
        "data": {
            "streak": stats.streak,
            "tasks_completed": stats.tasks_completed,
            "schoolwork_completed": stats.schoolwork_completed,
            "past_papers_completed": stats.past_papers_completed,
            "resources_downloaded": stats.resources_downloaded,
            "pomodoro_time": stats.pomodoro_time,
        },
    }


@router.post("/save_stats")
def save_stats(
    payload: SaveStatsIn,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    if payload.data_to_change != "pomodoro":
        raise BadRequest("Invalid request type")

    _stats_for(db, identity.user_id)
    db.query(StudentStats).filter(StudentStats.user_id == identity.user_id).update(
        {StudentStats.pomodoro_time: StudentStats.pomodoro_time + payload.time_revised},
        synchronize_session=False,
    )
    db.commit()
    return {"message": "Successfully amended data"}

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.errors import BadRequest
from app.models.entities import Task
from app.schemas.api import TaskCompleteIn, TaskIn
from app.services.auth import Identity
from app.services.courses import owned_subject
from app.services.dates import as_utc_naive, is_past, iso_z

router = APIRouter(prefix="/tasks")

PRIORITIES = ("Low", "Medium", "High")


def _serialize_task(task: Task) -> dict:
    return {
        "id": task.task_id,
        "name": task.task_name,
        "description": task.task_description or None,
        "due": iso_z(task.due),
        "priority": task.priority,
        "subject": task.subject_id or None,
    }


@router.get("/get_tasks")
def get_tasks(
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = db.query(Task).filter(Task.user_id == identity.user_id).order_by(Task.task_id.asc()).all()
    if not tasks:
        return {"tasks": [], "message": "No tasks found"}
    return {"tasks": [_serialize_task(task) for task in tasks]}


@router.post("/add_task")
def add_task(
    payload: TaskIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payload.name.strip() or not payload.priority:
        raise BadRequest("Name and priority are required")
    if payload.priority not in PRIORITIES:
        raise BadRequest("Priority must be Low, Medium or High")
    if is_past(payload.due):
        raise BadRequest("Due date cannot be in the past")
    if payload.subject is not None:
        owned_subject(db, payload.subject, identity.user_id)

    task = Task(
        user_id=identity.user_id,
        task_name=payload.name.strip(),
        task_description=payload.description or None,
        due=as_utc_naive(payload.due),
        priority=payload.priority,
        subject_id=payload.subject,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return {"task": _serialize_task(task), "message": "Task successfully added"}


@router.post("/complete_task")
def complete_task(
    payload: TaskCompleteIn,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    (
        db.query(Task)
        .filter(Task.task_id == payload.task_id, Task.user_id == identity.user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return {"message": f"Successfully deleted task {payload.task_id} from the DB"}

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.entities import PastPaper
from app.services.auth import Identity
from app.services.courses import resolve_course

router = APIRouter(prefix="/past_papers")


def _serialize_paper(paper: PastPaper) -> dict:
    return {
        "id": paper.paper_id,
        "resource_name": paper.resource_name,
        "series": paper.series,
        "files": sum(1 for location in paper.file_locations if location),
        "question_paper_location": paper.question_paper_location,
        "mark_scheme_location": paper.mark_scheme_location,
        "model_answers_location": paper.model_answers_location,
        "insert_location": paper.insert_location,
    }


@router.get("/get_past_paper_data")
def get_past_paper_data(
    qualification: str | None = None,
    subject: str | None = None,
    exam_board: str | None = Query(None, alias="examBoard"),
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    course = resolve_course(db, qualification=qualification, subject=subject, exam_board=exam_board)
    papers = (
        db.query(PastPaper)
        .filter(PastPaper.course_id == course.course_id)
        .order_by(PastPaper.paper_id.asc())
        .all()
    )
    return {"pastPaperEntries": [_serialize_paper(paper) for paper in papers]}

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.core.database import SessionLocal, init_db
from app.models.entities import Course, ExamDate

logger = logging.getLogger(__name__)


COURSES = [
    {
        "course_name": "Computer Science",
        "exam_board": "OCR",
        "qualification": "A level",
        "course_description": "OCR A level Computer Science (H446)",
        "papers": "Computer systems; Algorithms and programming; Programming project",
        "final_year": 13,
        "exam_dates": [
            (datetime(2027, 6, 9, 9, 0), "Paper 1"),
            (datetime(2027, 6, 16, 9, 0), "Paper 2"),
        ],
    },
    {
        "course_name": "Mathematics",
        "exam_board": "Edexcel",
        "qualification": "A level",
        "course_description": "Pearson Edexcel A level Mathematics (9MA0)",
        "papers": "Pure Mathematics 1; Pure Mathematics 2; Statistics and Mechanics",
        "final_year": 13,
        "exam_dates": [
            (datetime(2027, 6, 3, 9, 0), "Paper 1"),
            (datetime(2027, 6, 11, 9, 0), "Paper 2"),
            (datetime(2027, 6, 18, 9, 0), "Paper 3"),
        ],
    },
    {
        "course_name": "Computer Science",
        "exam_board": "AQA",
        "qualification": "GCSE",
        "course_description": "AQA GCSE Computer Science (8525)",
        "papers": "Computational thinking and programming skills; Computing concepts",
        "final_year": 11,
        "exam_dates": [
            (datetime(2027, 5, 17, 9, 0), "Paper 1"),
            (datetime(2027, 5, 24, 9, 0), "Paper 2"),
        ],
    },
]


def get_or_create(session: Session, model, defaults=None, **kwargs):
    instance = session.query(model).filter_by(**kwargs).one_or_none()
    if instance:
        return instance
    params = dict(kwargs)
    if defaults:
        params.update(defaults)
    instance = model(**params)
    session.add(instance)
    session.flush()
    return instance


def ensure_exam_dates(session: Session, course_id: int, exam_dates) -> None:
    for exam_date, exam_type in exam_dates:
        get_or_create(session, ExamDate, course_id=course_id, exam_date=exam_date, type=exam_type)


def seed(session_factory=SessionLocal) -> None:
    init_db(bind=session_factory.kw.get("bind"))
    session = session_factory()
    try:
        for definition in COURSES:
            course = get_or_create(
                session,
                Course,
                course_name=definition["course_name"],
                exam_board=definition["exam_board"],
                qualification=definition["qualification"],
                defaults={
                    "course_description": definition["course_description"],
                    "papers": definition["papers"],
                    "final_year": definition["final_year"],
                },
            )
            ensure_exam_dates(session, course.course_id, definition["exam_dates"])
        session.commit()
        logger.info("Seeded %d courses", len(COURSES))
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()

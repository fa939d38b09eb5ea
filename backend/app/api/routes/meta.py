from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.services.mailer import mail_is_configured

router = APIRouter(prefix="/meta")


@router.get("/health")
def health_meta(request: Request):
    db_ok = False
    db_error = None
    db = request.app.state.session_factory()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as exc:
        db_error = str(exc)
    finally:
        db.close()
    return {
        "ok": db_ok,
        "database": {"ok": db_ok, "error": db_error},
        "mail": {"configured": mail_is_configured()},
    }

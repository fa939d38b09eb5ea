import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_session_token
from app.core.config import settings
from app.core.errors import INVALID_CREDENTIALS, NotAuthenticated
from app.models.entities import User
from app.schemas.api import AuthLoginIn, AuthSignupIn
from app.services.accounts import create_account
from app.services.auth import create_session_token, expiry_from_now, verify_password
from app.services.dates import utcnow
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_session_cookie(response: JSONResponse, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def _clear_session_cookie(response: JSONResponse) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def _issue_session(db: Session, user: User, message: str) -> JSONResponse:
    token = create_session_token()
    SessionStore(db).replace_for_user(user.user_id, token, expiry_from_now(settings.session_ttl_seconds))
    user.last_login = utcnow()
    db.commit()

    response = JSONResponse({"message": message})
    _set_session_cookie(response, token)
    return response


@router.post("/login")
def login(payload: AuthLoginIn, db: Session = Depends(get_db)):
    username = payload.username.strip().lower()
    user = db.query(User).filter(User.username == username).one_or_none()
    # Unknown users and wrong passwords share one response.
    if user is None or not verify_password(payload.password, user.password):
        raise NotAuthenticated(INVALID_CREDENTIALS)

    logger.info("User %s logged in", user.user_id)
    return _issue_session(db, user, "Logged in")


@router.post("/signup")
def signup(payload: AuthSignupIn, db: Session = Depends(get_db)):
    user = create_account(db, payload)
    logger.info("Created %s account %s", user.role, user.user_id)
    return _issue_session(db, user, "Successfully signed up")


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    token = get_session_token(request)
    if token:
        try:
            SessionStore(db).delete_by_token(token)
        except Exception:
            db.rollback()
            logger.exception("Failed to delete session during logout")

    response = JSONResponse({"message": "Successfully logged out user"})
    _clear_session_cookie(response)
    return response

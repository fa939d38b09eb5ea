from typing import Callable

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Forbidden, NotAuthenticated
from app.services.auth import (
    Identity,
    RolePredicate,
    authorize,
    is_student,
    is_teacher,
    landing_page_for,
    resolve_session,
)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name) or None


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Identity | None:
    return resolve_session(db, get_session_token(request))


def get_current_user(identity: Identity | None = Depends(get_optional_user)) -> Identity:
    if identity is None:
        raise NotAuthenticated()
    return identity


def require_role(predicate: RolePredicate, message: str) -> Callable[..., Identity]:
    def dependency(identity: Identity = Depends(get_current_user)) -> Identity:
        if not authorize(identity, predicate):
            raise Forbidden(message)
        return identity

    return dependency


require_student = require_role(is_student, "Only students can use this feature")
require_teacher = require_role(is_teacher, "Only teachers can use this feature")


def page_redirect(
    identity: Identity | None,
    predicate: RolePredicate,
    *,
    fallback: str | None = None,
) -> RedirectResponse | None:
    """Return the redirect a page should issue, or None when access is allowed."""
    if identity is None:
        return RedirectResponse(url=settings.login_path, status_code=302)
    if not authorize(identity, predicate):
        return RedirectResponse(url=fallback or landing_page_for(identity), status_code=302)
    return None

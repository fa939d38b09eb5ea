"""Page gate.

Runs before routing and redirects browser navigations to protected page
prefixes to the login page unless the request carries a live session. It only
checks that a session exists; role checks happen in the page handlers.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Iterable

from fastapi import Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

EXCLUDED_PATH_PATTERN = re.compile(
    r"^/(api|static|_next)(/|$)"
    r"|^/(favicon\.ico|manifest\.json)$"
    r"|\.(png|jpe?g|svg|ico|css|js|json)$",
    re.IGNORECASE,
)


def is_protected_path(path: str, prefixes: Iterable[str]) -> bool:
    if EXCLUDED_PATH_PATTERN.search(path):
        return False
    return any(path.startswith(prefix) for prefix in prefixes)


def _check_session(session_factory: Callable, token: str) -> str:
    """Return "valid", "missing" or "expired" for a session token."""
    db = session_factory()
    try:
        store = SessionStore(db)
        record = store.find(token)
        if record is None:
            return "missing"
        if datetime.utcnow() > record.expires:
            store.delete_by_token(token)
            return "expired"
        return "valid"
    finally:
        db.close()


class SessionGateMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        protected_prefixes: Iterable[str] | None = None,
        login_path: str | None = None,
        cookie_name: str | None = None,
    ):
        super().__init__(app)
        self.protected_prefixes = tuple(
            protected_prefixes if protected_prefixes is not None else settings.protected_prefix_list
        )
        self.login_path = login_path or settings.login_path
        self.cookie_name = cookie_name or settings.session_cookie_name

    def _redirect(self, *, clear_cookie: bool = False) -> RedirectResponse:
        response = RedirectResponse(url=self.login_path, status_code=302)
        if clear_cookie:
            response.delete_cookie(self.cookie_name, path="/", httponly=True, samesite="lax")
        return response

    async def dispatch(self, request: Request, call_next):
        if not is_protected_path(request.url.path, self.protected_prefixes):
            return await call_next(request)

        token = request.cookies.get(self.cookie_name)
        if not token:
            return self._redirect()

        try:
            status = await run_in_threadpool(_check_session, request.app.state.session_factory, token)
        except SQLAlchemyError:
            logger.exception("Session gate lookup failed for %s", request.url.path)
            return self._redirect()

        if status == "expired":
            return self._redirect(clear_cookie=True)
        if status != "valid":
            return self._redirect()
        return await call_next(request)

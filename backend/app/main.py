import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import (
    auth,
    calendar,
    meta,
    pages,
    past_papers,
    resources,
    schoolwork,
    specifications,
    subjects,
    tasks,
    teacher_schoolwork,
    user,
    user_stats,
)
from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.errors import register_error_handlers
from app.core.gate import SessionGateMiddleware

logger = logging.getLogger(__name__)


def create_app(session_factory=SessionLocal) -> FastAPI:
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.auto_create_schema:
            init_db(bind=session_factory.kw.get("bind"))
            logger.info("Database schema ready")
        yield

    app = FastAPI(title="Pack API", version="0.1.0", lifespan=lifespan)
    app.state.session_factory = session_factory

    origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
    )
    app.add_middleware(SessionGateMiddleware)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or uuid4().hex
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    register_error_handlers(app)

    app.include_router(auth.router, tags=["auth"], prefix="/api")
    app.include_router(user.router, tags=["user"], prefix="/api")
    app.include_router(tasks.router, tags=["tasks"], prefix="/api")
    app.include_router(calendar.router, tags=["calendar"], prefix="/api")
    app.include_router(subjects.router, tags=["subjects"], prefix="/api")
    app.include_router(schoolwork.router, tags=["schoolwork"], prefix="/api")
    app.include_router(teacher_schoolwork.router, tags=["teacher_schoolwork"], prefix="/api")
    app.include_router(past_papers.router, tags=["past_papers"], prefix="/api")
    app.include_router(resources.router, tags=["resources"], prefix="/api")
    app.include_router(specifications.router, tags=["specifications"], prefix="/api")
    app.include_router(user_stats.router, tags=["user_stats"], prefix="/api")
    app.include_router(meta.router, tags=["meta"], prefix="/api")
    app.include_router(pages.router, tags=["pages"])
    return app


app = create_app()

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings


def engine_options(database_url: str) -> dict:
    # SQLite connections are shared across the threadpool FastAPI runs sync routes in.
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    # Registers every model on Base.metadata before creating tables.
    from app.models import entities  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from synergy_ems.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Request handlers run in FastAPI's thread pool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """One session per request; services decide when to commit."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the employee, leave and holiday tables if they are missing."""
    from synergy_ems.models import employee, holiday, leave_balance, leave_request, leave_type  # noqa: F401

    Base.metadata.create_all(bind=engine)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from church_api.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (tests, local runs) has no connection pool to size
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    Request-scoped session.

    Authorization reads and the mutation they guard share this session, so a
    role change and its permission replacement commit or roll back together.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from config import settings


def make_engine(url: str) -> Engine:
    """Create an engine; SQLite gets a busy timeout and enforced foreign keys"""
    is_sqlite = url.startswith("sqlite")
    new_engine = create_engine(
        url,
        connect_args={
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT,
        } if is_sqlite else {},
        pool_pre_ping=not is_sqlite,
    )

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def _sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency yielding a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Create all tables"""
    from database.models import Base
    Base.metadata.create_all(bind=bind or engine)

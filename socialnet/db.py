import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential

from socialnet.config import (
    DATABASE_URL,
    DB_ECHO,
    DB_RETRY_ATTEMPTS,
    DB_RETRY_MAX_WAIT,
    DB_RETRY_MIN_WAIT,
)
from socialnet.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    """
    Build an engine for the given URL.

    SQLite connections get the pysqlite transaction hooks so that
    SAVEPOINTs (used by link inserts and notifications) behave.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, pool_pre_ping=True, echo=DB_ECHO, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


engine = create_db_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one transaction per request."""
    with get_session() as session:
        yield session


@retry(
    stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=DB_RETRY_MIN_WAIT, max=DB_RETRY_MAX_WAIT),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def wait_for_database(bind: Engine = engine) -> None:
    """Block until the database answers ``SELECT 1``."""
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind)
    logger.info("Database schema ensured on %s", bind.url.render_as_string(hide_password=True))

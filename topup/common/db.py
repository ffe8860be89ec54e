"""Database bootstrap helpers shared by all services."""

from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from topup.common.config import settings
from topup.common.errors import StoreUnavailable
from topup.common.logging import logger


# Single SQLAlchemy engine per process.
engine = create_engine(settings.postgres_dsn, pool_pre_ping=True)
# `expire_on_commit=False` keeps ORM objects readable after commit in handlers.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""

    pass


@contextmanager
def session_scope(session_factory):
    """Open a session and surface any database failure as `StoreUnavailable`."""

    try:
        with session_factory() as db:
            yield db
    except SQLAlchemyError as exc:
        logger.error("store_error error=%s", exc)
        raise StoreUnavailable(error=str(exc)) from exc


def db_healthcheck(session_factory=SessionLocal) -> tuple[bool, str | None]:
    """Run a trivial query and report whether the store answered."""

    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
        return True, None
    except Exception as exc:
        return False, str(exc)

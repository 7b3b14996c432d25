"""Database engine helpers using SQLModel."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from chemical_inventory.config import get_settings

_engine: Engine | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # pysqlite starts transactions lazily and would skip them around SAVEPOINTs
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(connection) -> None:
    connection.exec_driver_sql("BEGIN")


def create_db_engine(url: str, *, echo: bool = False, pool_size: int = 10) -> Engine:
    """Build an engine; SQLite connections get foreign key enforcement."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_size=pool_size)

    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
        # a single shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, echo=echo, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    event.listen(engine, "begin", _begin_sqlite_transaction)
    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(
            settings.database.url,
            echo=settings.database.echo,
            pool_size=settings.database.pool_size,
        )
    return _engine


def init_db(engine: Engine | None = None) -> None:
    import chemical_inventory.models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def session_scope() -> Iterator[Session]:
    engine = get_engine()
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:  # pragma: no cover - re-raised upstream
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run one unit of work atomically on ``session``.

    When the caller already holds an open transaction the work runs inside a
    SAVEPOINT: a failure rolls back only this unit and committing stays with the
    caller. Otherwise a transaction is opened here and committed on exit.
    """
    if session.in_transaction():
        with session.begin_nested():
            yield session
    else:
        with session.begin():
            yield session

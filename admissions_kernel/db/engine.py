"""
Process-wide database handle for the admissions engine.

One engine and one session factory per process, set up by
``init_engine_from_url``.  PostgreSQL (through psycopg) is the
production backend: a bounded connection pool at READ COMMITTED, where
the version-checked UPDATEs in the admission store give per-admission
atomicity.  SQLite serves local runs and the test suite; its
connections may move between threads because collaborator calls run
on a worker pool.

Everything here raises ``RuntimeError`` when used before
``init_engine_from_url``.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from admissions_kernel.db.base import Base
from admissions_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _sqlite_engine(url, echo: bool) -> Engine:
    memory = url.database in (None, "", ":memory:")
    return create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool if memory else None,
    )


def _postgres_engine(url, echo: bool, **pool: int | bool) -> Engine:
    return create_engine(
        url,
        echo=echo,
        poolclass=QueuePool,
        isolation_level="READ COMMITTED",
        **pool,
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Build the process engine from ``database_url`` and return it.

    The pool arguments apply to PostgreSQL only.  Sessions come out of
    the factory with ``expire_on_commit=False`` so that committed
    domain objects can still be read after the transaction ends.
    """
    global _engine, _session_factory

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = _sqlite_engine(url, echo)
    else:
        engine = _postgres_engine(
            url,
            echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
        )

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": engine.dialect.name, "driver": engine.dialect.driver, "echo": echo},
    )
    return engine


def _require_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _session_factory


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    return _require_factory()()


def get_session_factory() -> sessionmaker[Session]:
    """The factory itself, for collaborators that commit on their own session."""
    return _require_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    A session that commits when the block exits cleanly.

    Any exception rolls the work back, is logged as
    ``transaction_rolled_back`` and propagates.  The session is closed
    either way.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Register every module's ORM classes, then create their tables."""
    from admissions_modules._orm_registry import import_all_orm_models

    import_all_orm_models()
    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose of the pool and forget the engine."""
    global _engine, _session_factory

    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        engine.dispose()


atexit.register(reset_engine)

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from orderdesk import config

Base = declarative_base()


def make_engine(url: str) -> Engine:
    """Build an engine for ``url``.

    SQLite (used by the test-suite and local tinkering) shares one connection
    and enforces foreign keys; PostgreSQL gets a sized pool and a per-statement
    timeout so an abandoned request cannot hold a transaction open forever.
    """
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    connect_args = {}
    if config.DB_STATEMENT_TIMEOUT_MS > 0:
        connect_args["options"] = f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}"

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        connect_args=connect_args,
    )


engine = make_engine(config.DATABASE_URL)

# Objects stay readable after commit: services build their response payloads
# inside the transaction, routers only serialise them.
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


@contextmanager
def session_scope(session_factory: sessionmaker, db: Optional[Session] = None) -> Iterator[Session]:
    """Join the caller's transaction, or run a transaction of our own.

    With ``db`` given nothing is committed here: the owner of that session
    decides. Without it a fresh session is opened, committed on success and
    rolled back on any exception.
    """
    if db is not None:
        yield db
        return

    with session_factory.begin() as session:
        yield session

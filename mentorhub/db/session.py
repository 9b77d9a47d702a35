"""
Database session management
Builds the engine and session factory handed to the application at startup
"""
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from mentorhub.core.config import Settings


# Base class for declarative models
Base = declarative_base()


def create_engine_from_settings(app_settings: Settings) -> Engine:
    """
    Create the database engine

    SQLite gets foreign key enforcement. In-memory URLs share a single
    connection; file databases open every transaction with BEGIN IMMEDIATE
    so a read followed by a write (booking overlap check, then insert)
    holds the write lock throughout. Other backends get a pooled engine.
    """
    url = app_settings.DATABASE_URL

    if app_settings.is_sqlite:
        in_memory = ":memory:" in url or url in ("sqlite://", "sqlite:///")
        kwargs = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": app_settings.DB_LOCK_TIMEOUT_SECONDS
            }
        }
        if in_memory:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=app_settings.DB_ECHO, **kwargs)

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            if not in_memory:
                # Let SQLAlchemy emit BEGIN instead of pysqlite's deferred one
                dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        if not in_memory:
            @event.listens_for(engine, "begin")
            def _begin_immediate(conn):
                conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(
        url,
        echo=app_settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=app_settings.DB_POOL_SIZE,
        max_overflow=app_settings.DB_MAX_OVERFLOW,
        pool_recycle=3600,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine"""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency to get database session

    Yields:
        Database session from the application's session factory
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine, drop_first: Optional[bool] = False) -> None:
    """
    Initialize database tables
    Creates all tables defined in models
    """
    from mentorhub.db import models  # noqa: F401
    if drop_first:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

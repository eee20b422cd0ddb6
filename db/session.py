# WORKFLOW: Database engine, session factory and request-scoped session handling.
# Used by: All database operations throughout the application
# Functions:
# 1. create_db_engine() - Build the process-wide engine from a database URL
# 2. create_session_factory() - Bind a sessionmaker to that engine
# 3. get_db() - Dependency injection for FastAPI endpoints
# 4. init_db() - Create the prices table, plus the content unique index in content mode
# 5. check_db_connection() - Health check for database connectivity
#
# Database lifecycle:
# Startup: create_db_engine() -> init_db() -> create_session_factory() -> app.state
# Runtime: get_db() -> Session -> Query -> Close session
# Shutdown: engine.dispose()
#
# The engine is owned by whoever creates it (the API lifespan or the CLI) and is
# passed explicitly; there is no module-level connection.

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import CONTENT_KEY_COLUMNS, CONTENT_UNIQUE_INDEX, Base
from etl.validators import IdentifierMode

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a database engine for the given URL.

    In-memory SQLite databases share a single connection through StaticPool so
    every session sees the same data.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args={
            "options": "-c timezone=utc"
        }
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency to get a database session.
    Yields a session from the factory stored on the application state and
    ensures it's closed after use.
    """
    SessionLocal = request.app.state.session_factory
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine, identifier_mode: IdentifierMode = IdentifierMode.CONTENT) -> None:
    """
    Initialize database tables.

    In content mode a unique index over the content columns is added so the
    store itself rejects a second copy of a record. Identifier mode keys on id
    only, so two ids may carry identical content.
    """
    try:
        Base.metadata.create_all(bind=engine)
        if IdentifierMode(identifier_mode) is IdentifierMode.CONTENT:
            with engine.begin() as conn:
                conn.execute(text(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {CONTENT_UNIQUE_INDEX} "
                    f"ON prices ({', '.join(CONTENT_KEY_COLUMNS)})"
                ))
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


def check_db_connection(engine: Engine) -> bool:
    """
    Check if database connection is working.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False

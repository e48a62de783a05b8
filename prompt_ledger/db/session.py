from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from prompt_ledger.config.settings import settings
from prompt_ledger.db.models import Base


def _validate_postgresql_driver() -> None:
    """Validate PostgreSQL driver is installed when using PostgreSQL.

    Imports psycopg2 eagerly since SQLAlchemy imports it when creating
    the engine.
    """
    if "postgres" in settings.database_url.lower():
        try:
            import psycopg2  # noqa: F401

            logger.info("PostgreSQL driver (psycopg2) is available")
        except ImportError as e:
            logger.error(
                "⚠️ CRITICAL: PostgreSQL driver (psycopg2) is not installed!\n"
                "Install it with: pip install psycopg2-binary"
            )
            raise ImportError("PostgreSQL driver required. Install with: pip install psycopg2-binary") from e


# Lazy initialization to avoid import-time database connections
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")

        is_postgresql = "postgres" in settings.database_url.lower()
        connect_args: dict = {}
        if is_postgresql:
            _validate_postgresql_driver()
            connect_args = {
                "connect_timeout": 10,
                "application_name": "prompt-ledger",
            }
        elif "sqlite" in settings.database_url.lower():
            logger.warning("Using SQLite database (local development only)")
            connect_args = {"check_same_thread": False}

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,  # Verify connections before using (important for cloud DBs)
            pool_recycle=3600,
        )
        logger.info("Database engine initialized")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=_get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


def init_db(engine: Engine | None = None) -> None:
    """Create ledger tables if they do not exist."""
    target = engine or _get_engine()
    Base.metadata.create_all(bind=target)
    logger.info("Ledger tables ensured")


def check_connection() -> str:
    """Run a trivial query against the ledger database.

    Returns:
        Dialect name of the connected database (e.g. "postgresql", "sqlite")

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
    """
    engine = _get_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database connection check failed: {type(e).__name__}: {e}")
        raise
    logger.info(f"Database connection ok ({engine.dialect.name})")
    return engine.dialect.name


@contextmanager
def get_session(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Get database session context manager.

    Commits on clean exit, rolls back and re-raises on any exception.

    Args:
        factory: Session factory to use. Defaults to the lazily built global one.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("Exception in session, rolling back")
        session.rollback()
        raise
    finally:
        session.close()

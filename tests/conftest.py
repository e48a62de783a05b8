"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import prompt_ledger.db.session as session_module
from prompt_ledger.db.models import Base
from prompt_ledger.ledger.scope import PartitionKey, resolve_partition_key
from prompt_ledger.ledger.store import PromptLedger

TEST_WORKSPACE = "invoicer"


@pytest.fixture(scope="function")
def db_engine(tmp_path, monkeypatch) -> Generator[Engine, None, None]:
    """Provides an isolated file-backed SQLite database per test.

    A file (not :memory:) so that concurrent saves each get their own
    connection, the way they would against a real server database.

    Patches prompt_ledger.db.session so every code path that builds its own
    sessions (PromptLedger(), the CLI) uses this database.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)

    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    monkeypatch.setattr(session_module, "_engine", engine)
    monkeypatch.setattr(session_module, "_SessionLocal", factory)

    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine: Engine) -> sessionmaker:
    return session_module.get_session_factory()


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Plain SQLAlchemy session on the test database.

    Usage:
        def test_something(db_session):
            create_prompt_version(db_session, ...)
            db_session.commit()
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ledger(session_factory: sessionmaker) -> PromptLedger:
    """Ledger on the test database with near-zero retry backoff."""
    return PromptLedger(session_factory, backoff_seconds=0.001, backoff_max_seconds=0.01)


@pytest.fixture
def shared_partition() -> PartitionKey:
    return resolve_partition_key(TEST_WORKSPACE, None, is_shared=True)


@pytest.fixture
def private_partition_u1() -> PartitionKey:
    return resolve_partition_key(TEST_WORKSPACE, "u1", is_shared=False)


@pytest.fixture
def private_partition_u2() -> PartitionKey:
    return resolve_partition_key(TEST_WORKSPACE, "u2", is_shared=False)

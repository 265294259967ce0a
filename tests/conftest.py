"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from finwallet.infrastructure.db.session import Base
import finwallet.infrastructure.db.models  # noqa: F401  (регистрирует таблицы)
from finwallet.application.users import RegisterUserUseCase


@pytest.fixture
def db_engine():
    """Create in-memory SQLite engine for tests"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def user(db_session):
    """Registered user with a default wallet (opening balance 100)"""
    return RegisterUserUseCase(db_session).execute("alice", "alice@example.com")


@pytest.fixture
def other_user(db_session):
    return RegisterUserUseCase(db_session).execute("bob")

"""
Database engine and session for the identity authority (accounts and audit_log tables).
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth_service.config import DATABASE_URL
from auth_service.models import Base

# sqlite:///:memory: is what the test suites use; StaticPool keeps one shared connection so the
# in-process validate_token sees the same accounts as the HTTP routes
if DATABASE_URL.startswith("sqlite:///:memory:"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Sync routes and threadpool validation touch SQLite from worker threads
    connect_args = {"check_same_thread": False} if "sqlite" in DATABASE_URL else {}
    engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the accounts and audit_log tables if missing."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

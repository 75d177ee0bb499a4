"""
Database engine and session for the call service. Only the calls table lives here;
accounts belong to the identity authority and are referenced by id.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from call_service.config import DATABASE_URL
from call_service.models import Base

if DATABASE_URL.startswith("sqlite:///:memory:"):
    # Tests: every session shares the single in-memory connection
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
    engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_db() -> None:
    """Create the calls table if missing."""
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

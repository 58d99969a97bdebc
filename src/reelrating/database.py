"""Database configuration and session management."""

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from reelrating.settings import settings

# Create database engine
engine = create_engine(settings.database_url, echo=settings.sql_echo, pool_pre_ping=True)

# Create session factory
SessionLocal = sessionmaker(bind=engine)


def get_db():
    """Get database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def upsert_insert(db: Session, model):
    """Return a dialect-specific INSERT that supports ON CONFLICT clauses.

    Both PostgreSQL and SQLite accept ``on_conflict_do_nothing`` /
    ``on_conflict_do_update`` keyed on a unique constraint's columns.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported on dialect {dialect!r}")

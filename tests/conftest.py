"""Shared pytest fixtures."""

import os

os.environ.setdefault("REELRATING_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reelrating.metadata import Base, Movie


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db(test_engine) -> Session:
    db = sessionmaker(bind=test_engine)()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def movie(test_db: Session) -> Movie:
    row = Movie(id="5f2b9c1e8d4a3b0012345678", title="Blade Runner")
    test_db.add(row)
    test_db.commit()
    return row


@pytest.fixture
def other_movie(test_db: Session) -> Movie:
    row = Movie(id="5f2b9c1e8d4a3b0087654321", title="Alien")
    test_db.add(row)
    test_db.commit()
    return row

from __future__ import annotations

import os
from collections.abc import Generator

# Keep the module-level engine in shop_sms.db away from the on-disk default.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shop_sms.db import Base, User


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_u1(db: Session) -> User:
    user = User(id="u1", profile={"addressBook": {"phone": "5551234", "country": "US"}})
    db.add(user)
    db.commit()
    return user

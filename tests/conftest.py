# tests/conftest.py

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.testclient import TestClient

from earnings_ledger.core.config import settings
from earnings_ledger.db.base_class import Base
from earnings_ledger.db.session import get_db
from earnings_ledger.main import app
import earnings_ledger.models  # noqa: F401  (registers tables on Base.metadata)


# --- In-memory test database ---
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


# --- Test Client Fixture ---
@pytest.fixture(scope="function")
def test_client(db, monkeypatch):
    """TestClient bound to the test session, with the scheduler disabled."""
    monkeypatch.setattr(settings, "ENABLE_SCHEDULER", False)
    app.dependency_overrides[get_db] = lambda: db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()

"""
Pytest configuration file.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.config import settings
from app.core.database import Base, get_db
from app.models.entrant import WaitlistEntrant, Interest
from main import app
import uuid

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db():
    """Create test database."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create test client."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}


def make_entrant(
    position: int,
    email: str = None,
    name: str = None,
    interest: Interest = Interest.ALL,
    referral_code: str = None,
    referred_by: str = None,
    early_access: bool = None
) -> WaitlistEntrant:
    """Build an entrant row directly, bypassing the service."""
    return WaitlistEntrant(
        id=str(uuid.uuid4()),
        name=name or f"Entrant {position}",
        email=email or f"entrant{position}@mail.com",
        interest=interest,
        referral_code=referral_code or f"ONE{position:06d}",
        referred_by=referred_by,
        waitlist_position=position,
        early_access=position <= 1000 if early_access is None else early_access
    )


@pytest.fixture
def sample_entrant(db):
    """Create a sample entrant at position 1."""
    entrant = make_entrant(
        1,
        email="ada@mail.com",
        name="Ada Lovelace",
        interest=Interest.PAYMENTS,
        referral_code="ONEADA001"
    )
    db.add(entrant)
    db.commit()
    db.refresh(entrant)
    return entrant


@pytest.fixture(autouse=True)
def mock_rate_limiter():
    """Let every request through unless a test says otherwise."""
    with patch('app.core.deps.allow_for_address') as mock_allow:
        mock_allow.return_value = True
        yield mock_allow

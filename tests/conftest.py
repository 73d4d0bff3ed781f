"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- TestClient setup
- Factories for incident records
- Dependency overrides for database session
"""

import os
import uuid
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from incidentdesk.db.base import Base
from incidentdesk.db.session import create_db_engine, get_db
from incidentdesk.main import app as main_app
from incidentdesk.models.incident import Incident
from incidentdesk.services.incident_store import IncidentStore

import incidentdesk.models  # noqa: F401


# =====================================
# Database Configuration
# =====================================

# StaticPool is used to maintain the same connection across tests
engine = create_db_engine("sqlite:///:memory:", poolclass=StaticPool)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before each test and drops them after.
    This ensures complete test isolation.

    Yields:
        SQLAlchemy Session object
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a TestClient with database dependency override.

    Args:
        db_session: Database session fixture

    Yields:
        TestClient instance
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    main_app.dependency_overrides[get_db] = override_get_db

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


@pytest.fixture
def store(db_session: Session) -> IncidentStore:
    return IncidentStore(db_session)


# =====================================
# Incident Fixtures
# =====================================

@pytest.fixture
def valid_incident_payload() -> dict:
    return {
        "title": "DB down",
        "service": "Database",
        "severity": "SEV1",
        "status": "OPEN",
    }


@pytest.fixture
def make_incident(db_session: Session) -> Callable[..., Incident]:
    """
    Factory that inserts an incident directly through the session.

    Timestamps default to a fixed instant so ordering tests can set
    their own values explicitly.
    """
    def _make(**overrides) -> Incident:
        values = {
            "id": str(uuid.uuid4()),
            "title": "API timeout errors",
            "service": "API Gateway",
            "severity": "SEV3",
            "status": "OPEN",
            "owner": None,
            "summary": None,
            "created_at": "2026-01-15T10:30:00.000Z",
            "updated_at": "2026-01-15T10:30:00.000Z",
        }
        values.update(overrides)
        incident = Incident(**values)
        db_session.add(incident)
        db_session.commit()
        return incident

    return _make


@pytest.fixture
def sample_incident(make_incident) -> Incident:
    return make_incident(
        title="Database connection pool exhausted",
        service="Database",
        severity="SEV1",
        owner="engineer-4",
        summary="Primary is not accepting connections.",
    )

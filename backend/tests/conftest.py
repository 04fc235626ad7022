"""Test fixtures for careercoach integration tests.

Uses a temp-file SQLite database configured exactly like production
(explicit BEGIN so savepoints work). Each test runs inside an outer
transaction that is rolled back afterwards; service-level commits only
release savepoints.
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Callable, Optional

import pytest
from sqlalchemy.orm import Session, sessionmaker

from careercoach.db.base import Base
from careercoach.db.engine import create_db_engine
from careercoach.insights.models import IndustryInsight  # noqa: F401 -- ensure models registered
from careercoach.insights.schemas import InsightPayload
from careercoach.users.models import User  # noqa: F401 -- ensure models registered
from careercoach.users.schemas import IdentityProfile


def make_payload(**overrides) -> InsightPayload:
    """Build a valid generated insight payload."""
    data = {
        "salary_ranges": [
            {"role": "Software Engineer", "min": 80000, "max": 160000, "median": 120000, "location": "US"},
            {"role": "Data Scientist", "min": 90000, "max": 170000, "median": 130000, "location": "US"},
        ],
        "growth_rate": 12.5,
        "demand_level": "HIGH",
        "top_skills": ["Python", "Cloud", "SQL"],
        "market_outlook": "POSITIVE",
        "key_trends": ["AI adoption", "Remote work"],
        "recommended_skills": ["Kubernetes", "MLOps"],
    }
    data.update(overrides)
    return InsightPayload.model_validate(data)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on read; treat naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FakeIdentityClient:
    """Records fetches and returns a canned IdentityProfile."""

    def __init__(
        self,
        profile: Optional[IdentityProfile] = None,
        error: Optional[Exception] = None,
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.profile = profile or IdentityProfile(
            email="ada@example.com", name="Ada", image_url="https://img.example.com/ada.png"
        )
        self.error = error
        self.on_fetch = on_fetch
        self.calls: list[str] = []

    def fetch_user(self, external_id: str) -> IdentityProfile:
        self.calls.append(external_id)
        if self.on_fetch is not None:
            self.on_fetch(external_id)
        if self.error is not None:
            raise self.error
        return self.profile


class FakeGenerator:
    """Records generate() calls and returns a canned payload."""

    def __init__(
        self,
        payload: Optional[InsightPayload] = None,
        error: Optional[Exception] = None,
        on_generate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.payload = payload or make_payload()
        self.error = error
        self.on_generate = on_generate
        self.calls: list[tuple[str, Optional[float]]] = []

    def generate(self, industry: str, timeout: Optional[float] = None) -> InsightPayload:
        self.calls.append((industry, timeout))
        if self.on_generate is not None:
            self.on_generate(industry)
        if self.error is not None:
            raise self.error
        return self.payload


class RecordingPageCache:
    """Stands in for PageCache; remembers revalidated paths."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.paths: list[str] = []
        self.error = error

    def revalidate_path(self, path: str) -> datetime:
        if self.error is not None:
            raise self.error
        self.paths.append(path)
        return datetime.now(timezone.utc)


@pytest.fixture(scope="session")
def test_engine():
    """Create a temp-file SQLite engine with all tables."""
    tmpfile = tempfile.NamedTemporaryFile(
        suffix=".db", delete=False, prefix="careercoach_test_"
    )
    db_path = tmpfile.name
    tmpfile.close()

    engine = create_db_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def db_session(test_engine):
    """Create a database session for each test.

    Rolls back all changes after each test to maintain isolation.
    """
    connection = test_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def session_factory(tmp_path):
    """Sessionmaker on a fresh file database, for tests that need several
    connections committing for real (no outer transaction)."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'race.db'}", echo=False)
    Base.metadata.create_all(engine)

    yield sessionmaker(bind=engine, expire_on_commit=False)

    engine.dispose()


@pytest.fixture
def identity_client():
    return FakeIdentityClient()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def page_cache():
    return RecordingPageCache()

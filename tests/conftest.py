import os
import sys
import tempfile

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Keep uploads and logs out of the working tree during tests
_tmp = tempfile.mkdtemp(prefix="proposals-test-")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_tmp, "uploads"))
os.environ.setdefault("LOG_FILE", os.path.join(_tmp, "server.log"))

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

from app.core.database import Base
from app.models import sql  # noqa: F401  registers tables
from app.services.lifecycle import ProposalLifecycle
from app.services.store import RecordStore

NOW = datetime(2024, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return RecordStore(db)


@pytest.fixture
def clock():
    """Mutable clock: tests advance it by assigning clock.now."""

    class Clock:
        now = NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def lifecycle(store, clock):
    return ProposalLifecycle(store, clock=clock, validity_days=0)


@pytest.fixture
def proposal_payload():
    """Factory for a valid camelCase proposal body."""

    def make(**overrides):
        data = {
            "packageName": "Porto Seguro - Primavera",
            "clientName": "Maria Souza",
            "departureDate": "2024-10-15",
            "returnDate": "2024-10-22",
            "adults": 2,
            "children": 0,
            "childrenAges": [],
            "hotelName": "Hotel Praia Azul",
            "hotelPhotos": ["http://localhost:8000/uploads/proposals/1/a.jpg"],
            "includedItems": ["Aéreo ida e volta", "Hotel com café da manhã"],
            "pricePerPerson": 250000,
            "installments": 4,
            "firstInstallmentDate": "2024-11-10",
        }
        data.update(overrides)
        return data

    return make

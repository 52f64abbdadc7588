from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salonbook.database import enable_sqlite_fk
from salonbook.models import Base, Salons, Services, Staff
from salonbook.services.scheduling import AppointmentManager, LocalStaffLocks

from .fakes import DEFAULT_HOURS, InMemoryStore, seed_store

# Sunday; the next day, 2024-01-01, is a Monday
NOW = datetime(2023, 12, 31, 12, 0)


@pytest.fixture
def store():
    return seed_store(InMemoryStore())


@pytest.fixture
def events():
    return []


@pytest.fixture
def manager(store, events):
    return AppointmentManager(
        store,
        LocalStaffLocks(timeout=5),
        notify=lambda event_type, payload: events.append((event_type, payload)),
        clock=lambda: NOW,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_fk)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_database(session)
    try:
        yield session
    finally:
        session.close()


def seed_database(session):
    """Same layout as tests.fakes.seed_store, in SQL."""
    downtown = Salons(id=1, name="Downtown Studio", hours=DEFAULT_HOURS)
    harbor = Salons(id=2, name="Harbor Cuts", hours={"Mon": "10 AM - 6 PM"})
    haircut = Services(id=1, name="Haircut", duration=30, price=Decimal("20.00"))
    color = Services(id=2, name="Color", duration=45, price=Decimal("35.00"))
    beard = Services(id=3, name="Beard Trim", duration=15, price=Decimal("10.50"))
    shave = Services(id=4, name="Hot Towel Shave", duration=20, price=Decimal("18.00"))
    downtown.services = [haircut, color, beard]
    harbor.services = [haircut, shave]

    session.add_all([
        downtown,
        harbor,
        Staff(id=1, salon_id=1, name="Alice"),
        Staff(id=2, salon_id=1, name="Bruno"),
        Staff(id=3, salon_id=2, name="Chen"),
    ])
    session.commit()

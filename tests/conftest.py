"""Pytest configuration: in-memory database and ledger fixtures."""

import os
from datetime import date
from decimal import Decimal

# Set test configuration BEFORE any imports from rentarium
# so the module-level engine and locale pick these values up
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOCALE"] = "en_PH"
os.environ.setdefault("LOG_LEVEL", "INFO")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from rentarium.models import Base  # noqa: E402
from rentarium.models.tenant import Tenant, TenantStatus  # noqa: E402


@pytest.fixture
def db_session():
    """Create a fresh in-memory database session per test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def tenant(db_session):
    """Active tenant paying 15,000 a month, lease anchored on the 15th."""
    tenant = Tenant(
        username="juan",
        name="Juan Dela Cruz",
        unit_number="A-101",
        monthly_rent=Decimal("15000.00"),
        lease_start=date(2024, 1, 15),
        lease_end=date(2024, 12, 31),
        status=TenantStatus.ACTIVE,
    )
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture
def other_tenant(db_session):
    """Second tenant for ownership checks."""
    tenant = Tenant(
        username="maria",
        name="Maria Santos",
        unit_number="B-202",
        monthly_rent=Decimal("12000.00"),
        lease_start=date(2024, 2, 1),
        status=TenantStatus.ACTIVE,
    )
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture
def today():
    """Fixed clock inside the tenant's March 2024 period."""
    return date(2024, 3, 20)

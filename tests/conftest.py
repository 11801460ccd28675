"""Pytest fixtures for payroll core tests."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from payroll_core.config import Settings
from payroll_core.database import make_session_factory
from payroll_core.models import Base, Employee, EmployeeStatus, Organization
from payroll_core.services import Actor, OrgContext, PayrollService

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# "Now" for every service built by the fixtures: mid-afternoon, 31 March 2026
FIXED_NOW = datetime(2026, 3, 31, 15, 0, 0)

# March 2026 in the 0-based month convention
MARCH = 2
YEAR = 2026

ADMIN_ID = UUID("00000000-0000-0000-0000-00000000a001")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="DEBUG",
    )


@pytest.fixture
async def engine():
    """Create a fresh schema per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    factory = make_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def organization(session: AsyncSession) -> Organization:
    """Create a test organization due for payroll on 1 March 2026."""
    org = Organization(
        id=uuid4(),
        name="Acme Corp",
        domain="acme.test",
        pay_frequency="monthly",
        next_payroll_date=datetime(2026, 3, 1),
    )
    session.add(org)
    await session.commit()
    return org


def make_employee(
    organization_id: UUID,
    first_name: str,
    salary: Decimal | None,
    *,
    status: str = EmployeeStatus.ACTIVE.value,
    created_at: datetime,
    role: str = "Engineer",
    deleted_at: datetime | None = None,
) -> Employee:
    return Employee(
        id=uuid4(),
        organization_id=organization_id,
        first_name=first_name,
        last_name="Tester",
        email=f"{first_name.lower()}@acme.test",
        role=role,
        status=status,
        salary=salary,
        created_at=created_at,
        deleted_at=deleted_at,
    )


@pytest.fixture
async def employees(session: AsyncSession, organization: Organization) -> dict[str, Employee]:
    """Three active employees plus three who must never be paid.

    Active monthly base pay: Alice 10000.00, Bob 5000.00, Carol 7500.00.
    """
    org_id = organization.id
    people = {
        "alice": make_employee(
            org_id, "Alice", Decimal("120000"), created_at=datetime(2024, 1, 1)
        ),
        "bob": make_employee(
            org_id, "Bob", Decimal("60000"), created_at=datetime(2024, 2, 1), role="Designer"
        ),
        "carol": make_employee(
            org_id, "Carol", Decimal("90000"), created_at=datetime(2024, 3, 1), role="Manager"
        ),
        "dave": make_employee(
            org_id,
            "Dave",
            Decimal("50000"),
            status=EmployeeStatus.ON_LEAVE.value,
            created_at=datetime(2024, 4, 1),
        ),
        "erin": make_employee(
            org_id,
            "Erin",
            Decimal("70000"),
            status=EmployeeStatus.TERMINATED.value,
            created_at=datetime(2024, 5, 1),
        ),
        "frank": make_employee(
            org_id,
            "Frank",
            Decimal("80000"),
            created_at=datetime(2024, 6, 1),
            deleted_at=datetime(2025, 1, 1),
        ),
    }
    session.add_all(people.values())
    await session.commit()
    return people


@pytest.fixture
def actor() -> Actor:
    return Actor(id=ADMIN_ID, name="Ada Admin")


@pytest.fixture
def context(organization: Organization, actor: Actor) -> OrgContext:
    return OrgContext(organization_id=organization.id, actor=actor)


@pytest.fixture
def service(session: AsyncSession, test_settings: Settings) -> PayrollService:
    """Payroll service on the test session with the clock pinned to FIXED_NOW."""
    return PayrollService.for_session(session, settings=test_settings, clock=lambda: FIXED_NOW)

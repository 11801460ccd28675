"""Integration test fixtures: HTTP client wired to the test database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.api.app import create_app
from payroll_core.api.dependencies import get_db_session, get_payroll_service
from payroll_core.services import OrgContext, PayrollService


@pytest.fixture
async def client(
    session: AsyncSession, service: PayrollService
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_payroll_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def headers(context: OrgContext) -> dict[str, str]:
    """Headers the auth layer would set for the admin user."""
    return {
        "X-Organization-ID": str(context.organization_id),
        "X-Actor-ID": str(context.actor.id),
        "X-Actor-Name": context.actor.name,
    }

"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_core.database import init_db
from payroll_core.services import Actor, OrgContext, PayrollService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        yield session


def _parse_uuid(value: str | None, header: str) -> UUID:
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header} header is required",
        )
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} format",
        )


async def get_org_context(
    x_organization_id: Annotated[str | None, Header()] = None,
    x_actor_id: Annotated[str | None, Header()] = None,
    x_actor_name: Annotated[str | None, Header()] = None,
) -> OrgContext:
    """Build the organization context from headers set by the auth layer."""
    organization_id = _parse_uuid(x_organization_id, "X-Organization-ID")
    actor_id = _parse_uuid(x_actor_id, "X-Actor-ID")
    return OrgContext(
        organization_id=organization_id,
        actor=Actor(id=actor_id, name=x_actor_name or str(actor_id)),
    )


async def get_employee_id(
    x_employee_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Employee record linked to the calling user."""
    return _parse_uuid(x_employee_id, "X-Employee-ID")


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Context = Annotated[OrgContext, Depends(get_org_context)]
EmployeeId = Annotated[UUID, Depends(get_employee_id)]


async def get_payroll_service(db: DbSession) -> PayrollService:
    return PayrollService.for_session(db)


Service = Annotated[PayrollService, Depends(get_payroll_service)]

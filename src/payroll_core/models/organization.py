"""Organization (tenant) model with payroll schedule fields."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_core.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_core.models.employee import Employee


class Organization(Base, TimestampMixin):
    """Multi-tenant container and owner of the payroll schedule."""

    __tablename__ = "organization"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    domain: Mapped[str | None] = mapped_column(String, nullable=True)
    timezone: Mapped[str] = mapped_column(String, nullable=False, default="UTC")

    # Payroll schedule
    pay_frequency: Mapped[str] = mapped_column(String, nullable=False, default="monthly")
    next_payroll_date: Mapped[datetime | None] = mapped_column(nullable=True)
    last_payroll_date: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "pay_frequency IN ('monthly', 'biweekly')",
            name="organization_pay_frequency_check",
        ),
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="organization")

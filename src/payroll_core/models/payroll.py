"""Payroll run and run item models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_core.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from payroll_core.models.organization import Organization


class RunStatus(str, Enum):
    """Payroll run status values."""

    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ImmutableRecordError(Exception):
    """Raised when code tries to change a persisted payroll run."""

    def __init__(self, entity: str, entity_id: UUID | None, operation: str):
        self.entity = entity
        self.entity_id = entity_id
        self.operation = operation
        super().__init__(
            f"{entity} {entity_id} is immutable once persisted ({operation} refused)"
        )


class PayrollRun(Base, TimestampMixin):
    """One settlement of one organization for one calendar month."""

    __tablename__ = "payroll_run"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
    )
    run_date: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    period_start: Mapped[datetime] = mapped_column(nullable=False)
    period_end: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=RunStatus.PROCESSING.value
    )
    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[UUID] = mapped_column(nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String, nullable=False)
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("idempotency_key", name="payroll_run_idempotency_key_unique"),
        CheckConstraint(
            "status IN ('PROCESSING', 'COMPLETED', 'FAILED')",
            name="payroll_run_status_check",
        ),
        CheckConstraint("total_amount >= 0", name="payroll_run_total_nonneg"),
        CheckConstraint("period_end >= period_start", name="payroll_run_dates_check"),
        Index("payroll_run_org_period_idx", "organization_id", "period_start"),
    )

    # Relationships
    organization: Mapped[Organization] = relationship()
    items: Mapped[list[PayrollRunItem]] = relationship(
        back_populates="payroll_run",
        order_by="PayrollRunItem.position",
        cascade="save-update, merge, expunge",
        # Never null out item foreign keys; deleting a run hits its own guard
        passive_deletes="all",
        lazy="selectin",
    )

    def item_for(self, employee_id: UUID) -> PayrollRunItem | None:
        """Return this run's line item for one employee, if present."""
        for item in self.items:
            if item.employee_id == employee_id:
                return item
        return None


class PayrollRunItem(Base):
    """One employee's figures within a payroll run."""

    __tablename__ = "payroll_run_item"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    employee_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_name: Mapped[str] = mapped_column(String, nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(nullable=False)
    bonus: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    deduction: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    net_amount: Mapped[Decimal] = mapped_column(nullable=False)
    salary_snapshot: Mapped[Decimal] = mapped_column(nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payroll_run_item_employee_unique"),
        CheckConstraint("net_amount >= 0", name="payroll_run_item_net_nonneg"),
        Index("payroll_run_item_employee_idx", "employee_id"),
    )

    # Relationships
    payroll_run: Mapped[PayrollRun] = relationship(back_populates="items")


def _has_column_changes(target: Any) -> bool:
    state = inspect(target)
    return any(
        state.attrs[attr.key].history.has_changes()
        for attr in state.mapper.column_attrs
    )


@event.listens_for(PayrollRun, "before_update")
@event.listens_for(PayrollRunItem, "before_update")
def _refuse_update(mapper: Any, connection: Any, target: Any) -> None:
    if _has_column_changes(target):
        raise ImmutableRecordError(type(target).__name__, target.id, "update")


@event.listens_for(PayrollRun, "before_delete")
@event.listens_for(PayrollRunItem, "before_delete")
def _refuse_delete(mapper: Any, connection: Any, target: Any) -> None:
    raise ImmutableRecordError(type(target).__name__, target.id, "delete")

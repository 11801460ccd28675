"""Payroll API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from payroll_core.api.dependencies import Context, EmployeeId, Service
from payroll_core.api.schemas import (
    ErrorResponse,
    LineItemResponse,
    PayrollRunListResponse,
    PayrollRunRequest,
    PayrollRunResponse,
    PayrollSummaryResponse,
    PayslipResponse,
    RunCommitResponse,
    RunWarningResponse,
    TrendPointResponse,
)

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.get("/preview", response_model=list[LineItemResponse])
async def preview_payroll(service: Service, context: Context) -> list[LineItemResponse]:
    """Base monthly pay for all active employees. No side effects."""
    items = await service.preview(context)
    return [LineItemResponse.model_validate(item) for item in items]


@router.post(
    "/run",
    response_model=RunCommitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def run_payroll(
    service: Service,
    context: Context,
    payload: PayrollRunRequest,
) -> RunCommitResponse:
    """Execute payroll for one month with optional adjustments."""
    outcome = await service.run(
        context,
        payload.period_month,
        payload.period_year,
        [adj.to_adjustment() for adj in payload.adjustments],
    )
    return RunCommitResponse(
        run=PayrollRunResponse.model_validate(outcome.run),
        warnings=[RunWarningResponse.model_validate(w) for w in outcome.warnings],
    )


@router.get("/runs", response_model=PayrollRunListResponse)
async def list_payroll_runs(
    service: Service,
    context: Context,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> PayrollRunListResponse:
    """Run history, newest period first."""
    runs = await service.list_runs(context, limit)
    return PayrollRunListResponse(
        items=[PayrollRunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.get(
    "/me",
    response_model=list[PayslipResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_my_payslips(
    service: Service,
    context: Context,
    employee_id: EmployeeId,
) -> list[PayslipResponse]:
    """The calling employee's payslips."""
    payslips = await service.list_my_payslips(context, employee_id)
    return [PayslipResponse.model_validate(p) for p in payslips]


@router.get(
    "/summary",
    response_model=PayrollSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def payroll_summary(service: Service, context: Context) -> PayrollSummaryResponse:
    summary = await service.payroll_summary(context)
    return PayrollSummaryResponse.model_validate(summary)


@router.get("/trend", response_model=list[TrendPointResponse])
async def payroll_trend(service: Service, context: Context) -> list[TrendPointResponse]:
    """Completed payroll totals for the last twelve months."""
    points = await service.payroll_trend(context)
    return [TrendPointResponse.model_validate(p) for p in points]

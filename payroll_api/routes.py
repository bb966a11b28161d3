"""HTTP routes: thin translation between requests and PayrollService calls."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from payroll_api.schemas import AmountRequest, ApiResponse, BalanceResponse
from payroll_kernel.services.payroll_service import PayrollService

router = APIRouter(tags=["Payroll"])


def get_payroll_service(request: Request) -> PayrollService:
    return request.app.state.payroll_service


async def _form_or_query(request: Request, name: str) -> str | None:
    """Form body value first, then query string (like a combined form lookup)."""
    form = await request.form()
    value = form.get(name)
    if value is None:
        value = request.query_params.get(name)
    return value if isinstance(value, str) else None


def _format_amount(value: Decimal) -> str:
    return format(value.normalize(), "f")


@router.post("/topup", response_model=ApiResponse)
def top_up_balance(
    body: AmountRequest,
    service: PayrollService = Depends(get_payroll_service),
) -> ApiResponse:
    """Add funds to the company balance."""
    result = service.top_up(body.amount)
    return ApiResponse(success=True, message=result.message)


@router.post("/deduct", response_model=ApiResponse)
def deduct_balance(
    body: AmountRequest,
    service: PayrollService = Depends(get_payroll_service),
) -> ApiResponse:
    """Remove funds from the company balance."""
    result = service.deduct(body.amount)
    return ApiResponse(success=True, message=result.message)


@router.post("/withdraw", response_model=ApiResponse)
async def withdraw_salary(
    request: Request,
    service: PayrollService = Depends(get_payroll_service),
) -> ApiResponse:
    """Pay out an employee's monthly salary (form or query parameters)."""
    employee_id = await _form_or_query(request, "employee_id")
    secret_id = await _form_or_query(request, "secret_id")
    result = await run_in_threadpool(service.withdraw, employee_id, secret_id)
    return ApiResponse(success=True, message=result.message)


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    service: PayrollService = Depends(get_payroll_service),
) -> BalanceResponse:
    """Current company balance."""
    balance = service.get_balance()
    return BalanceResponse(
        success=True,
        message="Balance retrieved",
        balance=_format_amount(balance),
    )

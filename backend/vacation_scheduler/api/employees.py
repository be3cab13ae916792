# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from vacation_scheduler.exceptions import NotFoundError
from vacation_scheduler.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from vacation_scheduler.services.employee import EmployeeInfo, get_employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


def _to_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        position=employee.position,
        hire_date=employee.hire_date,
    )


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
) -> EmployeeResponse:
    """Create or update an employee in the stub registry."""
    svc = get_employee_service()
    employee = EmployeeInfo(
        id=employee_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        position=payload.position,
        hire_date=payload.hire_date,
    )
    svc.seed(employee)  # type: ignore[attr-defined]
    return _to_response(employee)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(employee_id: uuid.UUID) -> EmployeeResponse:
    """Get a single employee."""
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return _to_response(employee)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees() -> EmployeeListResponse:
    """List all employees."""
    employees = await get_employee_service().list_employees()
    return EmployeeListResponse(items=[_to_response(e) for e in employees], total=len(employees))

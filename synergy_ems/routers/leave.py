from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from synergy_ems.core.config import settings
from synergy_ems.core.exceptions import ValidationFailedError
from synergy_ems.core.roles import is_admin_or_manager_role
from synergy_ems.database import get_db
from synergy_ems.models.employee import Employee
from synergy_ems.models.leave_request import LeaveStatus
from synergy_ems.routers.auth_deps import get_current_employee, require_admin, resolve_target_employee
from synergy_ems.schemas.leave import (
    BalanceCheckResponse,
    BusinessDaysResponse,
    LeaveBalanceResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveStatsResponse,
    LeaveTypeCreate,
    LeaveTypeResponse,
)
from synergy_ems.services.leave_calculations import request_day_count
from synergy_ems.services.leave_service import LeaveService

router = APIRouter(prefix="/leave", tags=["leave"])


# --- Leave types ---

@router.get("/types", response_model=List[LeaveTypeResponse])
def list_leave_types(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return LeaveService(db).get_leave_types()

@router.post("/types", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
def create_leave_type(
    payload: LeaveTypeCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_admin()),
):
    return LeaveService(db).create_leave_type(**payload.model_dump())


# --- Balances ---

@router.get("/balances", response_model=List[LeaveBalanceResponse])
def get_leave_balances(
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    target_id = resolve_target_employee(current_employee, employee_id)
    return LeaveService(db).get_leave_balances(target_id, year)

@router.get("/balances/check", response_model=BalanceCheckResponse)
def check_leave_balance(
    leave_type_id: int,
    days: float = Query(gt=0),
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    target_id = resolve_target_employee(current_employee, employee_id)
    return LeaveService(db).check_leave_balance(target_id, leave_type_id, days, year)

@router.get("/stats", response_model=LeaveStatsResponse)
def get_leave_stats(
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    target_id = resolve_target_employee(current_employee, employee_id)
    return LeaveService(db).get_leave_stats(target_id, year)


# --- Day count preview ---

@router.get("/business-days", response_model=BusinessDaysResponse)
def preview_business_days(
    start_date: date,
    end_date: Optional[date] = None,
    is_half_day: bool = False,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    end_date = start_date if is_half_day or end_date is None else end_date
    holidays = [] if is_half_day else LeaveService(db).holidays_between(start_date, end_date)
    return BusinessDaysResponse(
        start_date=start_date,
        end_date=end_date,
        is_half_day=is_half_day,
        days=request_day_count(start_date, end_date, is_half_day, holidays),
        holidays=[h.date for h in holidays],
    )


# --- Requests ---

@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    employee_id: Optional[int] = None,
    status: Optional[LeaveStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(default=settings.default_page_limit, ge=1, le=500),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    # Managers see everyone unless they narrow it; employees only ever see their own
    if employee_id is None and is_admin_or_manager_role(current_employee.role):
        target_id = None
    else:
        target_id = resolve_target_employee(current_employee, employee_id)
    return LeaveService(db).get_leave_requests(
        employee_id=target_id,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )

@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    leave_request = LeaveService(db).get_leave_request(request_id)
    resolve_target_employee(current_employee, leave_request.employee_id)
    return leave_request

@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    target_id = resolve_target_employee(current_employee, payload.employee_id)
    if payload.half_day_period and not payload.is_half_day:
        raise ValidationFailedError({"half_day_period": "Half-day period is only valid for half-day requests"})
    return LeaveService(db).create_leave_request(
        employee_id=target_id,
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        is_half_day=payload.is_half_day,
        half_day_period=payload.half_day_period.value if payload.half_day_period else None,
    )

@router.post("/requests/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return LeaveService(db).cancel_request(request_id, current_employee)

@router.delete("/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    LeaveService(db).delete_request(request_id, current_employee)

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from synergy_ems.database import get_db
from synergy_ems.models.employee import Employee
from synergy_ems.routers.auth_deps import get_current_employee, require_admin, require_manager, resolve_target_employee
from synergy_ems.schemas.employee import EmployeeCreate, EmployeeResponse
from synergy_ems.schemas.leave import LeaveBalanceResponse
from synergy_ems.services.employee_service import EmployeeService
from synergy_ems.services.leave_service import LeaveService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/me", response_model=EmployeeResponse)
def read_current_employee(current_employee: Employee = Depends(get_current_employee)):
    return current_employee


@router.get("", response_model=List[EmployeeResponse])
def list_employees(
    department: Optional[str] = None,
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_manager()),
):
    return EmployeeService(db).list_employees(department=department, role=role)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def read_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    resolve_target_employee(current_employee, employee_id)
    return EmployeeService(db).get_employee(employee_id)


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_admin()),
):
    return EmployeeService(db).create_employee(**payload.model_dump())


@router.post("/{employee_id}/leave-balances/initialize", response_model=List[LeaveBalanceResponse])
def initialize_leave_balances(
    employee_id: int,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_admin()),
):
    EmployeeService(db).get_employee(employee_id)
    return LeaveService(db).initialize_balances(employee_id, year)

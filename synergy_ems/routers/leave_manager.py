from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from synergy_ems.database import get_db
from synergy_ems.models.employee import Employee
from synergy_ems.routers.auth_deps import get_current_employee, require_manager
from synergy_ems.schemas.leave import LeaveRejectRequest, LeaveReportResponse, LeaveRequestResponse
from synergy_ems.services.leave_service import LeaveService

router = APIRouter(prefix="/leave", tags=["leave-manager"])


@router.get("/pending", response_model=List[LeaveRequestResponse])
def list_pending_requests(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_manager()),
):
    return LeaveService(db).get_pending_requests()


@router.get("/report", response_model=LeaveReportResponse)
def leave_report(
    start_date: date,
    end_date: date,
    department: Optional[str] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_manager()),
):
    """Leave taken in a date range, grouped by type and status. `department=all` means every department."""
    return LeaveService(db).get_leave_report(start_date, end_date, department)


# The role check for decisions lives in the workflow so every caller gets it,
# hence plain get_current_employee here rather than require_manager.
@router.post("/requests/{request_id}/approve", response_model=LeaveRequestResponse)
def approve_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return LeaveService(db).approve_request(request_id, current_employee)


@router.post("/requests/{request_id}/reject", response_model=LeaveRequestResponse)
def reject_leave_request(
    request_id: int,
    payload: Optional[LeaveRejectRequest] = Body(default=None),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    reason = payload.rejection_reason if payload else None
    return LeaveService(db).reject_request(request_id, current_employee, reason)

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from synergy_ems.database import get_db
from synergy_ems.models.employee import Employee
from synergy_ems.routers.auth_deps import get_current_employee, require_admin
from synergy_ems.schemas.leave import HolidayCreate, HolidayResponse
from synergy_ems.services.leave_service import LeaveService

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("", response_model=List[HolidayResponse])
def list_holidays(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    return LeaveService(db).get_holidays(year)


@router.post("", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
def add_holiday(
    payload: HolidayCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_admin()),
):
    return LeaveService(db).add_holiday(
        name=payload.name,
        holiday_date=payload.date,
        is_optional=payload.is_optional,
        description=payload.description,
    )


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(
    holiday_id: int,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_admin()),
):
    LeaveService(db).delete_holiday(holiday_id)

from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import date, datetime
from typing import List, Optional

from synergy_ems.models.leave_request import HalfDayPeriod, LeaveStatus
from synergy_ems.services.leave_calculations import available_days as compute_available, usage_percentage


class LeaveTypeCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = "#6366f1"
    default_days: float = Field(default=0.0, ge=0)
    description: Optional[str] = None

class LeaveTypeResponse(BaseModel):
    id: int
    name: str
    color: Optional[str] = None
    default_days: float = 0.0
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceResponse(BaseModel):
    id: int
    employee_id: int
    leave_type_id: int
    year: int
    total_days: float = 0.0
    used_days: float = 0.0
    pending_days: float = 0.0
    leave_type: Optional[LeaveTypeResponse] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def available_days(self) -> float:
        return compute_available(self)

    @computed_field
    @property
    def used_percentage(self) -> float:
        return usage_percentage(self.used_days, self.total_days)

    @computed_field
    @property
    def pending_percentage(self) -> float:
        return usage_percentage(self.pending_days, self.total_days)

class BalanceCheckResponse(BaseModel):
    has_balance: bool
    # None means the employee has no balance row for this type: no limit applies
    available: Optional[float] = None


class EmployeeBrief(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveRequestCreate(BaseModel):
    # Everything optional at the schema level: missing fields are reported
    # field-by-field by the service instead of as a generic 422.
    leave_type_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None
    employee_id: Optional[int] = None # Admins/managers may file on behalf of someone else

class LeaveRejectRequest(BaseModel):
    rejection_reason: Optional[str] = None

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    total_days: float
    is_half_day: bool = False
    half_day_period: Optional[str] = None
    reason: Optional[str] = None
    status: LeaveStatus
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee: Optional[EmployeeBrief] = None
    approver: Optional[EmployeeBrief] = None
    leave_type: Optional[LeaveTypeResponse] = None

    model_config = ConfigDict(from_attributes=True)


# Module-level alias so the `date` field below does not shadow the type
HolidayDate = date

class HolidayCreate(BaseModel):
    name: str = Field(min_length=1)
    date: HolidayDate
    is_optional: bool = False
    description: Optional[str] = None

class HolidayResponse(HolidayCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class RequestCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    total: int = 0

class LeaveStatsResponse(BaseModel):
    employee_id: int
    year: int
    balances: List[LeaveBalanceResponse]
    total_entitled: float
    total_used: float
    total_pending: float
    total_available: float
    request_counts: RequestCounts

class BusinessDaysResponse(BaseModel):
    start_date: date
    end_date: date
    is_half_day: bool
    days: float
    holidays: List[date] = []



class LeaveTypeUsage(BaseModel):
    leave_type_id: int
    name: str
    color: str
    count: int
    total_days: float

class LeaveReportSummary(BaseModel):
    total_requests: int
    total_days: float
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0

class LeaveReportResponse(BaseModel):
    start_date: date
    end_date: date
    department: Optional[str] = None
    requests: List[LeaveRequestResponse]
    by_type: List[LeaveTypeUsage]
    summary: LeaveReportSummary

"""
Leave operations against the relational store: leave types, balances,
requests, holidays and per-employee statistics.

Every write keeps the employee's balance row in step with the request
lifecycle:

    create             pending_days += days
    approve            pending_days -= days, used_days += days
    reject / cancel    pending_days -= days
    delete (pending)   pending_days -= days

Status changes are conditional UPDATEs on `status = 'pending'` and balance
deltas are applied in SQL, so concurrent decisions cannot both succeed and
concurrent balance writes are not lost.
"""
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from synergy_ems.core.config import settings
from synergy_ems.core.exceptions import InvalidTransitionError, NotFoundError, ValidationFailedError
from synergy_ems.models.employee import Employee
from synergy_ems.models.holiday import Holiday
from synergy_ems.models.leave_balance import LeaveBalance
from synergy_ems.models.leave_request import HalfDayPeriod, LeaveRequest, LeaveStatus
from synergy_ems.models.leave_type import LeaveType
from synergy_ems.services import leave_workflow
from synergy_ems.services.base import BaseService
from synergy_ems.services.leave_calculations import (
    available_days,
    request_day_count,
    summarize_balances,
)


def _current_year() -> int:
    return date.today().year


def _format_days(value: float) -> str:
    return f"{value:g}"


class LeaveService(BaseService):
    """Leave management backed by one SQLAlchemy session."""

    def __init__(self, db: Session):
        super().__init__(db)

    # ------------------------------------------------------------------
    # Leave types
    # ------------------------------------------------------------------

    def get_leave_types(self) -> List[LeaveType]:
        return self.db.query(LeaveType).order_by(LeaveType.name).all()

    def get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = self.db.get(LeaveType, leave_type_id)
        if leave_type is None:
            raise NotFoundError("Leave type", leave_type_id)
        return leave_type

    def create_leave_type(self, name: str, color: str = "#6366f1", default_days: float = 0.0,
                          description: Optional[str] = None) -> LeaveType:
        name = name.strip()
        if self.db.query(LeaveType).filter(LeaveType.name == name).first():
            raise ValidationFailedError({"name": f"Leave type '{name}' already exists"})
        leave_type = LeaveType(name=name, color=color, default_days=default_days, description=description)
        self.db.add(leave_type)
        self.commit()
        self.db.refresh(leave_type)
        self.log_info(f"Created leave type {leave_type.name}", leave_type_id=leave_type.id)
        return leave_type

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def get_leave_balances(self, employee_id: int, year: Optional[int] = None) -> List[LeaveBalance]:
        year = year or _current_year()
        return (
            self.db.query(LeaveBalance)
            .filter(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
            .order_by(LeaveBalance.leave_type_id)
            .all()
        )

    def _find_balance(self, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        return (
            self.db.query(LeaveBalance)
            .filter(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.year == year,
            )
            .first()
        )

    def initialize_balances(self, employee_id: int, year: Optional[int] = None) -> List[LeaveBalance]:
        """
        Create one balance row per leave type from its default entitlement.
        Rows that already exist are left as they are, so calling twice is safe.
        Types without a default entitlement get no row and stay unlimited.
        """
        year = year or _current_year()
        existing = {b.leave_type_id for b in self.get_leave_balances(employee_id, year)}
        created = 0
        for leave_type in self.get_leave_types():
            if leave_type.id in existing or not leave_type.default_days:
                continue
            self.db.add(LeaveBalance(
                employee_id=employee_id,
                leave_type_id=leave_type.id,
                year=year,
                total_days=leave_type.default_days,
                used_days=0.0,
                pending_days=0.0,
            ))
            created += 1
        self.commit()
        self.log_info(f"Initialized {created} leave balance(s) for employee {employee_id}", year=year)
        return self.get_leave_balances(employee_id, year)

    def check_leave_balance(self, employee_id: int, leave_type_id: int, days: float,
                            year: Optional[int] = None) -> Dict[str, Any]:
        """Whether ``days`` fit in the balance. No balance row means no limit."""
        balance = self._find_balance(employee_id, leave_type_id, year or _current_year())
        available = available_days(balance)
        if available is None:
            return {"has_balance": True, "available": None}
        return {"has_balance": available >= days, "available": available}

    def _adjust_balance(self, leave_request: LeaveRequest, pending_delta: float = 0.0, used_delta: float = 0.0):
        pending = func.coalesce(LeaveBalance.pending_days, 0.0) + pending_delta
        updated = (
            self.db.query(LeaveBalance)
            .filter(
                LeaveBalance.employee_id == leave_request.employee_id,
                LeaveBalance.leave_type_id == leave_request.leave_type_id,
                LeaveBalance.year == leave_request.start_date.year,
            )
            .update(
                {
                    LeaveBalance.pending_days: case((pending < 0, 0.0), else_=pending),
                    LeaveBalance.used_days: func.coalesce(LeaveBalance.used_days, 0.0) + used_delta,
                },
                synchronize_session=False,
            )
        )
        if updated:
            self.log_info(
                f"Balance adjusted: pending {pending_delta:+g}, used {used_delta:+g}",
                leave_request_id=leave_request.id,
                leave_type_id=leave_request.leave_type_id,
            )

    def _current_status(self, request_id: int) -> str:
        status = self.db.query(LeaveRequest.status).filter(LeaveRequest.id == request_id).scalar()
        if status is None:
            raise NotFoundError("Leave request", request_id)
        return status

    def _move_from_pending(self, leave_request: LeaveRequest, target: LeaveStatus, **values) -> None:
        """Move a pending request to `target` in one guarded UPDATE; a lost race raises 409."""
        updated = (
            self.db.query(LeaveRequest)
            .filter(LeaveRequest.id == leave_request.id, LeaveRequest.status == LeaveStatus.PENDING.value)
            .update({"status": target.value, **values}, synchronize_session=False)
        )
        if not updated:
            current = self._current_status(leave_request.id)
            self.log_warning(
                f"Leave request {leave_request.id} is already {current}, not moving to {target.value}",
                leave_request_id=leave_request.id,
            )
            raise InvalidTransitionError(current, target.value)


    # ------------------------------------------------------------------
    # Holidays
    # ------------------------------------------------------------------

    def get_holidays(self, year: Optional[int] = None) -> List[Holiday]:
        year = year or _current_year()
        return (
            self.db.query(Holiday)
            .filter(Holiday.date >= date(year, 1, 1), Holiday.date <= date(year, 12, 31))
            .order_by(Holiday.date)
            .all()
        )

    def holidays_between(self, start_date: date, end_date: date) -> List[Holiday]:
        """Mandatory holidays that fall inside the range; optional ones are still working days."""
        return (
            self.db.query(Holiday)
            .filter(
                Holiday.date >= start_date,
                Holiday.date <= end_date,
                Holiday.is_optional.is_(False),
            )
            .order_by(Holiday.date)
            .all()
        )

    def add_holiday(self, name: str, holiday_date: date, is_optional: bool = False,
                    description: Optional[str] = None) -> Holiday:
        if self.db.query(Holiday).filter(Holiday.date == holiday_date).first():
            raise ValidationFailedError({"date": f"A holiday already exists on {holiday_date.isoformat()}"})
        holiday = Holiday(name=name, date=holiday_date, is_optional=is_optional, description=description)
        self.db.add(holiday)
        self.commit()
        self.db.refresh(holiday)
        return holiday

    def delete_holiday(self, holiday_id: int) -> None:
        holiday = self.db.get(Holiday, holiday_id)
        if holiday is None:
            raise NotFoundError("Holiday", holiday_id)
        self.db.delete(holiday)
        self.commit()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def get_leave_requests(
        self,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest)
        if employee_id:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if status:
            query = query.filter(LeaveRequest.status == LeaveStatus(status).value)
        if start_date:
            query = query.filter(LeaveRequest.start_date >= start_date)
        if end_date:
            query = query.filter(LeaveRequest.end_date <= end_date)
        return (
            query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            .limit(limit or settings.default_page_limit)
            .all()
        )

    def get_pending_requests(self) -> List[LeaveRequest]:
        return self.get_leave_requests(status=LeaveStatus.PENDING.value)

    def get_leave_request(self, request_id: int) -> LeaveRequest:
        leave_request = self.db.get(LeaveRequest, request_id)
        if leave_request is None:
            raise NotFoundError("Leave request", request_id)
        return leave_request

    def create_leave_request(
        self,
        employee_id: int,
        leave_type_id: Optional[int],
        start_date: Optional[date],
        end_date: Optional[date] = None,
        reason: Optional[str] = None,
        is_half_day: bool = False,
        half_day_period: Optional[str] = None,
    ) -> LeaveRequest:
        """
        Validate and file a new pending request.

        All field problems are collected and raised together as a
        ValidationFailedError before anything is written.
        """
        if self.db.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id)

        errors: Dict[str, str] = {}

        if not leave_type_id:
            errors["leave_type_id"] = "Please select a leave type"
        elif self.db.get(LeaveType, leave_type_id) is None:
            errors["leave_type_id"] = "Selected leave type does not exist"

        if not start_date:
            errors["start_date"] = "Start date is required"
        elif start_date < date.today():
            errors["start_date"] = "Start date cannot be in the past"

        if is_half_day:
            end_date = start_date
            half_day_period = HalfDayPeriod(half_day_period or HalfDayPeriod.MORNING).value
        else:
            half_day_period = None
            if not end_date:
                errors["end_date"] = "End date is required"
            elif start_date and end_date < start_date:
                errors["end_date"] = "End date must be after start date"

        total_days = 0.0
        if start_date and end_date and "end_date" not in errors:
            holidays = [] if is_half_day else self.holidays_between(start_date, end_date)
            total_days = request_day_count(start_date, end_date, is_half_day, holidays)
            if total_days <= 0:
                errors["end_date"] = "Selected dates contain no working days"

        if "leave_type_id" not in errors and start_date and total_days > 0:
            check = self.check_leave_balance(employee_id, leave_type_id, total_days, start_date.year)
            if not check["has_balance"]:
                errors["leave_type_id"] = f"Insufficient balance. Available: {_format_days(check['available'])} days"

        if errors:
            raise ValidationFailedError(errors)

        leave_request = LeaveRequest(
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            is_half_day=is_half_day,
            half_day_period=half_day_period,
            status=LeaveStatus.PENDING.value,
        )
        self.db.add(leave_request)
        self.db.flush()
        self._adjust_balance(leave_request, pending_delta=total_days)
        self.commit()
        self.db.refresh(leave_request)
        self.log_info(
            f"Leave request {leave_request.id} filed for {_format_days(total_days)} day(s)",
            employee_id=employee_id,
        )
        return leave_request

    def _decide(self, leave_request: LeaveRequest, target: LeaveStatus, approver: Employee,
                rejection_reason: Optional[str] = None) -> LeaveRequest:
        leave_workflow.ensure_can_decide(approver)
        leave_workflow.ensure_transition(leave_request.status, target)

        values = {"approver_id": approver.id, "approved_at": datetime.now(timezone.utc)}
        if target == LeaveStatus.REJECTED:
            values["rejection_reason"] = rejection_reason
        self._move_from_pending(leave_request, target, **values)

        if target == LeaveStatus.APPROVED:
            self._adjust_balance(leave_request, pending_delta=-leave_request.total_days,
                                 used_delta=leave_request.total_days)
        else:
            self._adjust_balance(leave_request, pending_delta=-leave_request.total_days)

        self.commit()
        self.db.refresh(leave_request)
        self.log_info(
            f"Leave request {leave_request.id} {target.value} by employee {approver.id}",
            leave_request_id=leave_request.id,
        )
        return leave_request

    def approve_request(self, request_id: int, approver: Employee) -> LeaveRequest:
        return self._decide(self.get_leave_request(request_id), LeaveStatus.APPROVED, approver)

    def reject_request(self, request_id: int, approver: Employee,
                       rejection_reason: Optional[str] = None) -> LeaveRequest:
        return self._decide(self.get_leave_request(request_id), LeaveStatus.REJECTED, approver, rejection_reason)

    def cancel_request(self, request_id: int, actor: Employee) -> LeaveRequest:
        leave_request = self.get_leave_request(request_id)
        leave_workflow.ensure_can_cancel(actor, leave_request)
        leave_workflow.ensure_transition(leave_request.status, LeaveStatus.CANCELLED)

        self._move_from_pending(leave_request, LeaveStatus.CANCELLED)
        self._adjust_balance(leave_request, pending_delta=-leave_request.total_days)
        self.commit()
        self.db.refresh(leave_request)
        self.log_info(f"Leave request {leave_request.id} cancelled", leave_request_id=leave_request.id)
        return leave_request

    def delete_request(self, request_id: int, actor: Employee) -> None:
        """Hard delete, only ever for requests that are still pending."""
        leave_request = self.get_leave_request(request_id)
        leave_workflow.ensure_can_delete(actor, leave_request)

        deleted = (
            self.db.query(LeaveRequest)
            .filter(LeaveRequest.id == request_id, LeaveRequest.status == LeaveStatus.PENDING.value)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise InvalidTransitionError(self._current_status(request_id), "deleted")

        self._adjust_balance(leave_request, pending_delta=-leave_request.total_days)
        self.db.expunge(leave_request)
        self.commit()
        self.log_info(f"Leave request {request_id} deleted", leave_request_id=request_id)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def get_leave_report(self, start_date: date, end_date: date,
                         department: Optional[str] = None) -> Dict[str, Any]:
        """
        Requests that fall entirely inside [start_date, end_date], optionally
        for one department, grouped by leave type and by status.
        """
        if end_date < start_date:
            raise ValidationFailedError({"end_date": "End date must be after start date"})
        if department == "all":
            department = None

        query = (
            self.db.query(LeaveRequest)
            .join(Employee, LeaveRequest.employee_id == Employee.id)
            .filter(LeaveRequest.start_date >= start_date, LeaveRequest.end_date <= end_date)
        )
        if department:
            query = query.filter(Employee.department == department)
        requests = query.order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc()).all()

        by_type: Dict[int, Dict[str, Any]] = {}
        for leave_request in requests:
            leave_type = leave_request.leave_type
            usage = by_type.setdefault(leave_request.leave_type_id, {
                "leave_type_id": leave_request.leave_type_id,
                "name": leave_type.name if leave_type else "Unknown",
                "color": (leave_type.color if leave_type else None) or "#6b7280",
                "count": 0,
                "total_days": 0.0,
            })
            usage["count"] += 1
            usage["total_days"] += leave_request.total_days or 0.0

        counts = Counter(r.status for r in requests)
        return {
            "start_date": start_date,
            "end_date": end_date,
            "department": department,
            "requests": requests,
            "by_type": sorted(by_type.values(), key=lambda usage: usage["name"]),
            "summary": {
                "total_requests": len(requests),
                "total_days": sum(r.total_days or 0.0 for r in requests),
                **{status.value: counts.get(status.value, 0) for status in LeaveStatus},
            },
        }

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_leave_stats(self, employee_id: int, year: Optional[int] = None) -> Dict[str, Any]:
        year = year or _current_year()
        balances = self.get_leave_balances(employee_id, year)
        requests = (
            self.db.query(LeaveRequest)
            .filter(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.start_date >= date(year, 1, 1),
                LeaveRequest.end_date <= date(year, 12, 31),
            )
            .all()
        )
        counts = Counter(r.status for r in requests)
        summary = summarize_balances(balances)
        return {
            "employee_id": employee_id,
            "year": year,
            "balances": balances,
            **summary.to_dict(),
            "request_counts": {
                "pending": counts.get(LeaveStatus.PENDING.value, 0),
                "approved": counts.get(LeaveStatus.APPROVED.value, 0),
                "rejected": counts.get(LeaveStatus.REJECTED.value, 0),
                "cancelled": counts.get(LeaveStatus.CANCELLED.value, 0),
                "total": len(requests),
            },
        }

# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import employee, leave_type, leave_balance, leave_request, holiday

# Explicit class exports for cleaner imports
from .employee import Employee
from .leave_type import LeaveType
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, LeaveStatus, HalfDayPeriod
from .holiday import Holiday

__all__ = [
    "Employee",
    "LeaveType",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "HalfDayPeriod",
    "Holiday",
]

"""
Leave request lifecycle.

    pending ──> approved
       │──────> rejected
       └──────> cancelled

Only pending requests move; every other status is terminal. Permission
checks live here too so the HTTP layer and scripts share one rulebook.
"""
import logging
from typing import Dict, FrozenSet

from synergy_ems.core.exceptions import AccessDeniedError, InvalidTransitionError
from synergy_ems.core.roles import is_admin_or_manager_role
from synergy_ems.models.leave_request import LeaveStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}


def can_transition(current, target) -> bool:
    try:
        current, target = LeaveStatus(current), LeaveStatus(target)
    except ValueError:
        return False
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current, target) -> LeaveStatus:
    """Return the target status or raise InvalidTransitionError."""
    if not can_transition(current, target):
        current_value = current.value if isinstance(current, LeaveStatus) else str(current)
        target_value = target.value if isinstance(target, LeaveStatus) else str(target)
        logger.warning(f"Rejected leave transition {current_value} -> {target_value}")
        raise InvalidTransitionError(current_value, target_value)
    return LeaveStatus(target)


def ensure_can_decide(actor) -> None:
    """Approve/reject is reserved for Admin and Manager roles."""
    if actor is None or not is_admin_or_manager_role(actor.role):
        raise AccessDeniedError("Only managers and admins can approve or reject leave requests")


def ensure_can_cancel(actor, leave_request) -> None:
    if actor is None or actor.id != leave_request.employee_id:
        raise AccessDeniedError("Only the employee who made the request can cancel it")


def ensure_can_delete(actor, leave_request) -> None:
    """Owners may withdraw their own pending request; admins and managers may remove any pending one."""
    if actor is None:
        raise AccessDeniedError()
    if actor.id != leave_request.employee_id and not is_admin_or_manager_role(actor.role):
        raise AccessDeniedError("You can only delete your own leave requests")
    if LeaveStatus(leave_request.status) != LeaveStatus.PENDING:
        raise InvalidTransitionError(leave_request.status, "deleted")

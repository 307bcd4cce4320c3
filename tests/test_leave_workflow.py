from types import SimpleNamespace

import pytest

from synergy_ems.core.exceptions import AccessDeniedError, InvalidTransitionError
from synergy_ems.models.leave_request import LeaveStatus
from synergy_ems.services import leave_workflow


def _actor(id, role):
    return SimpleNamespace(id=id, role=role)

def _request(employee_id=1, status="pending"):
    return SimpleNamespace(employee_id=employee_id, status=status)


@pytest.mark.parametrize("target", [LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED])
def test_pending_can_move_to_every_terminal_state(target):
    assert leave_workflow.can_transition("pending", target)
    assert leave_workflow.ensure_transition(LeaveStatus.PENDING, target) == target

@pytest.mark.parametrize("current", ["approved", "rejected", "cancelled"])
@pytest.mark.parametrize("target", ["pending", "approved", "rejected", "cancelled"])
def test_terminal_states_do_not_move(current, target):
    assert not leave_workflow.can_transition(current, target)

def test_approving_an_approved_request_is_rejected():
    with pytest.raises(InvalidTransitionError) as exc_info:
        leave_workflow.ensure_transition("approved", LeaveStatus.APPROVED)
    assert exc_info.value.status_code == 409
    assert exc_info.value.details == {"current_status": "approved", "target_status": "approved"}

def test_unknown_status_is_not_a_valid_transition():
    assert not leave_workflow.can_transition("archived", "approved")

@pytest.mark.parametrize("role", ["Admin", "manager", " MANAGER "])
def test_elevated_roles_can_decide(role):
    leave_workflow.ensure_can_decide(_actor(9, role))

@pytest.mark.parametrize("role", ["Employee", "", None, "Contractor"])
def test_other_roles_cannot_decide(role):
    with pytest.raises(AccessDeniedError):
        leave_workflow.ensure_can_decide(_actor(9, role))

def test_only_owner_can_cancel():
    leave_workflow.ensure_can_cancel(_actor(1, "Employee"), _request(employee_id=1))
    with pytest.raises(AccessDeniedError):
        leave_workflow.ensure_can_cancel(_actor(2, "Admin"), _request(employee_id=1))

def test_delete_requires_pending_status():
    with pytest.raises(InvalidTransitionError):
        leave_workflow.ensure_can_delete(_actor(1, "Employee"), _request(employee_id=1, status="approved"))

def test_delete_by_manager_or_owner_only():
    leave_workflow.ensure_can_delete(_actor(1, "Employee"), _request(employee_id=1))
    leave_workflow.ensure_can_delete(_actor(5, "Manager"), _request(employee_id=1))
    with pytest.raises(AccessDeniedError):
        leave_workflow.ensure_can_delete(_actor(2, "Employee"), _request(employee_id=1))

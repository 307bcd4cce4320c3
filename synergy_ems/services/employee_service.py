from typing import List, Optional

from sqlalchemy.orm import Session

from synergy_ems.core.exceptions import NotFoundError, ValidationFailedError
from synergy_ems.core.roles import normalize_role
from synergy_ems.models.employee import Employee
from synergy_ems.services.base import BaseService
from synergy_ems.services.leave_service import LeaveService


class EmployeeService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.auth_user_id == auth_user_id).first()

    def list_employees(self, department: Optional[str] = None, role: Optional[str] = None) -> List[Employee]:
        query = self.db.query(Employee)
        if department:
            query = query.filter(Employee.department == department)
        employees = query.order_by(Employee.name).all()
        if role:
            # Stored roles are not normalized, so filter after loading
            wanted = normalize_role(role)
            employees = [e for e in employees if e.normalized_role == wanted]
        return employees

    def create_employee(
        self,
        name: str,
        email: str,
        role: str = "Employee",
        department: Optional[str] = None,
        avatar: Optional[str] = None,
        auth_user_id: Optional[str] = None,
        initialize_balances: bool = True,
    ) -> Employee:
        """
        Register an employee row for an identity that already exists at the
        provider, then seed this year's leave balances.
        """
        email = email.strip().lower()
        errors = {}
        if self.db.query(Employee).filter(Employee.email == email).first():
            errors["email"] = "An employee with this email already exists"
        if auth_user_id and self.get_by_auth_user_id(auth_user_id):
            errors["auth_user_id"] = "This account is already linked to an employee"
        if errors:
            raise ValidationFailedError(errors)

        employee = Employee(
            name=name.strip(),
            email=email,
            role=normalize_role(role) or "Employee",
            department=department,
            avatar=avatar,
            auth_user_id=auth_user_id,
        )
        self.db.add(employee)
        self.commit()
        self.db.refresh(employee)
        self.log_info(f"Created employee {employee.id}", employee_id=employee.id)

        if initialize_balances:
            LeaveService(self.db).initialize_balances(employee.id)
        return employee

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from synergy_ems.database import Base
from synergy_ems.core.roles import normalize_role, is_admin_role, is_admin_or_manager_role


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    # Subject ("sub") of the identity provider's token for this person
    auth_user_id = Column(String, unique=True, index=True, nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, default="Employee", nullable=False)
    department = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    leave_requests = relationship(
        "LeaveRequest",
        foreign_keys="[LeaveRequest.employee_id]",
        back_populates="employee",
        cascade="all, delete-orphan",
    )
    leave_balances = relationship("LeaveBalance", back_populates="employee", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Employee {self.email} ({self.normalized_role})>"

    @property
    def normalized_role(self) -> str:
        return normalize_role(self.role)

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)

    @property
    def can_approve(self) -> bool:
        """Check if employee can approve or reject leave requests."""
        return is_admin_or_manager_role(self.role)

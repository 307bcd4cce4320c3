from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from synergy_ems.database import Base

class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_leave_balance_employee_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), index=True, nullable=False)
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), index=True, nullable=False)
    year = Column(Integer, nullable=False)
    total_days = Column(Float, default=0.0)
    used_days = Column(Float, default=0.0)
    pending_days = Column(Float, default=0.0)

    employee = relationship("Employee", back_populates="leave_balances")
    leave_type = relationship("LeaveType", lazy="joined")

from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from synergy_ems.database import Base

class LeaveType(Base):
    __tablename__ = "leave_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False) # e.g. "Annual Leave", "Sick Leave"
    color = Column(String, default="#6366f1")
    default_days = Column(Float, default=0.0) # Yearly entitlement used when balances are initialized
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

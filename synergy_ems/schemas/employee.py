from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from synergy_ems.core.roles import normalize_role

class EmployeeBase(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    role: str = "Employee"
    department: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("role")
    @classmethod
    def canonical_role(cls, value: str) -> str:
        return normalize_role(value) or "Employee"

class EmployeeCreate(EmployeeBase):
    # Subject of the identity provider account, created outside this service
    auth_user_id: Optional[str] = None
    initialize_balances: bool = True

class EmployeeResponse(EmployeeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    auth_user_id: Optional[str] = None
    created_at: Optional[datetime] = None

"""
Identity and role dependencies.

Sign-in happens at the external identity provider; requests arrive with the
provider's access token as a bearer credential. We verify the signature and
audience, then resolve the token subject to an Employee row.
"""
import logging
from typing import Callable, Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from synergy_ems.core.auth_errors import AuthErrorCode, classify_auth_error, friendly_auth_message
from synergy_ems.core.config import settings
from synergy_ems.core.exceptions import AccessDeniedError, AuthenticationError
from synergy_ems.core.roles import ADMIN, MANAGER, is_admin_or_manager_role, is_allowed_role
from synergy_ems.database import get_db
from synergy_ems.models.employee import Employee
from synergy_ems.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict:
    """Verify a provider token. Raises AuthenticationError with a classified code."""
    try:
        return jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
            audience=settings.auth.jwt_audience,
        )
    except JWTError as e:
        code = classify_auth_error(e)
        if code == AuthErrorCode.UNKNOWN:
            code = AuthErrorCode.INVALID_TOKEN
        logger.info(f"Token rejected: {e}", extra={"auth_code": code.value})
        raise AuthenticationError(friendly_auth_message(code), error_code=code.value) from e


def get_current_employee(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Employee:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(
            friendly_auth_message(AuthErrorCode.INVALID_TOKEN), error_code=AuthErrorCode.INVALID_TOKEN.value
        )

    payload = decode_access_token(credentials.credentials)
    subject = payload.get("sub")
    if not subject:
        logger.warning("Authentication failed: Missing subject in token")
        raise AuthenticationError("Missing subject in token", error_code=AuthErrorCode.INVALID_TOKEN.value)

    employee = EmployeeService(db).get_by_auth_user_id(subject)
    if employee is None:
        logger.warning(f"Authentication failed: no employee linked to {subject}")
        raise AccessDeniedError("No employee profile is linked to this account")
    return employee


def require_role(allowed_roles: Iterable[str]) -> Callable:
    """
    Dependency factory that checks the employee's role, case-insensitively.

    Usage:
        @router.post("/types")
        def create_type(actor: Employee = Depends(require_role(["Admin"]))):
            ...
    """
    allowed = list(allowed_roles)

    def role_checker(current_employee: Employee = Depends(get_current_employee)) -> Employee:
        if not is_allowed_role(current_employee.role, allowed):
            raise AccessDeniedError(f"Access denied. Required roles: {allowed}")
        return current_employee
    return role_checker


def require_admin():
    return require_role([ADMIN])


def require_manager():
    """Shorthand for requiring Admin or Manager."""
    return require_role([ADMIN, MANAGER])


def resolve_target_employee(current_employee: Employee, employee_id: Optional[int]) -> int:
    """
    Which employee's data a request is about. Plain employees are pinned to
    themselves; admins and managers may look at anyone.
    """
    if employee_id is None or employee_id == current_employee.id:
        return current_employee.id
    if not is_admin_or_manager_role(current_employee.role):
        raise AccessDeniedError("You can only access your own leave records")
    return employee_id

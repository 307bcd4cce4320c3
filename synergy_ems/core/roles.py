"""
Role helpers.

Roles are stored as free-form strings on the employee row ("admin", "ADMIN",
" Manager "), so every comparison goes through normalize_role first.
"""
from typing import Iterable, Optional

ADMIN = "Admin"
MANAGER = "Manager"
EMPLOYEE = "Employee"

_CANONICAL = {
    "admin": ADMIN,
    "manager": MANAGER,
    "employee": EMPLOYEE,
}

ELEVATED_ROLES = (ADMIN, MANAGER)


def normalize_role(role: Optional[str]) -> str:
    """Map known roles to their canonical spelling; unknown roles pass through untouched."""
    if not role:
        return ""
    return _CANONICAL.get(str(role).strip().lower(), role)


def is_admin_role(role: Optional[str]) -> bool:
    return normalize_role(role) == ADMIN


def is_manager_role(role: Optional[str]) -> bool:
    return normalize_role(role) == MANAGER


def is_admin_or_manager_role(role: Optional[str]) -> bool:
    return normalize_role(role) in ELEVATED_ROLES


def is_allowed_role(role: Optional[str], allowed_roles: Iterable[str] = ()) -> bool:
    """Case-insensitive membership test. An empty allow-list admits nobody."""
    normalized_allowed = {normalize_role(r) for r in allowed_roles}
    return normalize_role(role) in normalized_allowed

from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailedError(AppException):
    """Field-level validation failure raised before anything is written."""
    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            message="; ".join(self.field_errors.values()) or "Validation failed",
            status_code=422,
            error_code="VALIDATION_FAILED",
            details={"fields": self.field_errors}
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class InvalidTransitionError(AppException):
    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot move a {current} leave request to {target}",
            status_code=409,
            error_code="INVALID_STATE_TRANSITION",
            details={"current_status": current, "target_status": target}
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials", error_code: str = "AUTH_FAILED"):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

"""
Classification of identity-provider errors into stable codes.

The provider reports failures as free text ("Invalid login credentials",
"Email not confirmed", ...). Callers should branch on AuthErrorCode, never on
the text: a structured code from the provider is preferred, and the message
patterns below are only consulted when no code is present.
"""
import enum
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


class AuthErrorCode(str, enum.Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_CONFIRMED = "EMAIL_NOT_CONFIRMED"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_MFA_CODE = "INVALID_MFA_CODE"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    UNKNOWN = "UNKNOWN"


FRIENDLY_MESSAGES = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorCode.EMAIL_NOT_CONFIRMED: "Please confirm your email address before signing in",
    AuthErrorCode.USER_ALREADY_EXISTS: "An account with this email already exists",
    AuthErrorCode.WEAK_PASSWORD: "Password must be at least 6 characters",
    AuthErrorCode.RATE_LIMITED: "Too many attempts. Please wait a moment and try again",
    AuthErrorCode.INVALID_MFA_CODE: "The verification code is invalid or has expired",
    AuthErrorCode.SESSION_EXPIRED: "Your session has expired. Please sign in again",
    AuthErrorCode.INVALID_TOKEN: "Could not validate credentials",
    AuthErrorCode.UNKNOWN: "An unexpected error occurred. Please try again.",
}

# Provider-issued codes we know how to map directly.
_PROVIDER_CODES = {
    "invalid_credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "email_not_confirmed": AuthErrorCode.EMAIL_NOT_CONFIRMED,
    "user_already_exists": AuthErrorCode.USER_ALREADY_EXISTS,
    "email_exists": AuthErrorCode.USER_ALREADY_EXISTS,
    "weak_password": AuthErrorCode.WEAK_PASSWORD,
    "over_request_rate_limit": AuthErrorCode.RATE_LIMITED,
    "over_email_send_rate_limit": AuthErrorCode.RATE_LIMITED,
    "mfa_verification_failed": AuthErrorCode.INVALID_MFA_CODE,
    "mfa_challenge_expired": AuthErrorCode.INVALID_MFA_CODE,
    "session_expired": AuthErrorCode.SESSION_EXPIRED,
    "session_not_found": AuthErrorCode.SESSION_EXPIRED,
    "bad_jwt": AuthErrorCode.INVALID_TOKEN,
}

# Fallback only. Order matters: first match wins.
_MESSAGE_PATTERNS: Tuple[Tuple[str, AuthErrorCode], ...] = (
    ("invalid login credentials", AuthErrorCode.INVALID_CREDENTIALS),
    ("email not confirmed", AuthErrorCode.EMAIL_NOT_CONFIRMED),
    ("already registered", AuthErrorCode.USER_ALREADY_EXISTS),
    ("already exists", AuthErrorCode.USER_ALREADY_EXISTS),
    ("password should be at least", AuthErrorCode.WEAK_PASSWORD),
    ("rate limit", AuthErrorCode.RATE_LIMITED),
    ("too many requests", AuthErrorCode.RATE_LIMITED),
    ("invalid totp code", AuthErrorCode.INVALID_MFA_CODE),
    ("signature has expired", AuthErrorCode.SESSION_EXPIRED),
    ("token has expired", AuthErrorCode.SESSION_EXPIRED),
    ("jwt expired", AuthErrorCode.SESSION_EXPIRED),
    ("signature verification failed", AuthErrorCode.INVALID_TOKEN),
    ("invalid audience", AuthErrorCode.INVALID_TOKEN),
    ("not enough segments", AuthErrorCode.INVALID_TOKEN),
)


def _extract(error: Any) -> Tuple[Optional[str], str]:
    """Pull (code, message) out of a dict payload, an exception, or a bare string."""
    if error is None:
        return None, ""
    if isinstance(error, str):
        return None, error
    if isinstance(error, dict):
        code = error.get("code") or error.get("error_code")
        message = error.get("message") or error.get("msg") or error.get("error_description") or ""
        return code, str(message)
    code = getattr(error, "code", None) or getattr(error, "error_code", None)
    message = getattr(error, "message", None) or str(error)
    return (code if isinstance(code, str) else None), str(message)


def classify_auth_error(error: Any) -> AuthErrorCode:
    code, message = _extract(error)
    if code:
        mapped = _PROVIDER_CODES.get(code.strip().lower())
        if mapped is not None:
            return mapped
        try:
            return AuthErrorCode(code.strip().upper())
        except ValueError:
            logger.debug(f"Unrecognised auth provider code {code!r}, falling back to message")

    lowered = message.lower()
    for pattern, mapped in _MESSAGE_PATTERNS:
        if pattern in lowered:
            return mapped

    if message:
        logger.info("Auth error could not be classified", extra={"auth_message": message})
    return AuthErrorCode.UNKNOWN


def friendly_auth_message(error: Any) -> str:
    """User-facing copy for a provider error (or an AuthErrorCode)."""
    code = error if isinstance(error, AuthErrorCode) else classify_auth_error(error)
    return FRIENDLY_MESSAGES[code]

import pytest
from synergy_ems.core.auth_errors import AuthErrorCode, classify_auth_error, friendly_auth_message


def test_structured_code_wins_over_message():
    error = {"code": "email_not_confirmed", "message": "Invalid login credentials"}
    assert classify_auth_error(error) == AuthErrorCode.EMAIL_NOT_CONFIRMED

def test_our_own_code_names_are_accepted():
    assert classify_auth_error({"error_code": "RATE_LIMITED"}) == AuthErrorCode.RATE_LIMITED

@pytest.mark.parametrize("message, expected", [
    ("Invalid login credentials", AuthErrorCode.INVALID_CREDENTIALS),
    ("Email not confirmed", AuthErrorCode.EMAIL_NOT_CONFIRMED),
    ("User already registered", AuthErrorCode.USER_ALREADY_EXISTS),
    ("Password should be at least 6 characters", AuthErrorCode.WEAK_PASSWORD),
    ("Signature has expired.", AuthErrorCode.SESSION_EXPIRED),
    ("Invalid TOTP code entered", AuthErrorCode.INVALID_MFA_CODE),
])
def test_message_fallback(message, expected):
    assert classify_auth_error(message) == expected

def test_exception_objects_are_classified_by_message():
    assert classify_auth_error(ValueError("Invalid login credentials")) == AuthErrorCode.INVALID_CREDENTIALS

def test_unknown_code_falls_back_to_message():
    error = {"code": "something_new", "message": "Invalid login credentials"}
    assert classify_auth_error(error) == AuthErrorCode.INVALID_CREDENTIALS

def test_unrecognised_errors_degrade_to_unknown():
    assert classify_auth_error("The provider is on fire") == AuthErrorCode.UNKNOWN
    assert classify_auth_error(None) == AuthErrorCode.UNKNOWN

def test_friendly_messages():
    assert friendly_auth_message("Invalid login credentials") == "Invalid email or password"
    assert friendly_auth_message(AuthErrorCode.SESSION_EXPIRED) == "Your session has expired. Please sign in again"
    assert friendly_auth_message("???") == "An unexpected error occurred. Please try again."

"""Custom validators and sanitizers"""

from typing import Optional
from email_validator import validate_email, EmailNotValidError

from referralhub.core.exceptions import BlankFieldError, ValidationError

def validate_email_address(email: str) -> str:
    """Validate and normalize email"""
    email = email.strip().lower()

    try:
        # Validate email
        validation = validate_email(email, check_deliverability=False)
        return validation.normalized
    except EmailNotValidError as e:
        raise ValueError(str(e))

def require_email(email: Optional[str], field: str = "Email") -> str:
    """Service-level email check raising ValidationError"""
    if not email or not email.strip():
        raise BlankFieldError(field)
    try:
        return validate_email_address(email)
    except ValueError as e:
        raise ValidationError(f"{field} is invalid: {e}", error_code="INVALID_EMAIL")

def require_text(value: Optional[str], field: str) -> str:
    """Return stripped text or raise when blank"""
    if value is None or not value.strip():
        raise BlankFieldError(field)
    return value.strip()

def optional_text(value: Optional[str]) -> str:
    return value.strip() if value else ""

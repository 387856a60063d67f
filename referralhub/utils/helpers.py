"""Helper utilities"""

from datetime import datetime
from typing import Optional
import secrets
import string

from referralhub.core.config import settings

def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)

def generate_referral_code(email: str, prefix: Optional[str] = None) -> str:
    """
    Generate a referral code from the email local part

    Format: prefix + first three letters of the local part + three random
    upper-case alphanumerics, e.g. DEVGNANJOH7QZ.
    """
    prefix = settings.REFERRAL_CODE_PREFIX if prefix is None else prefix
    local_part = email.split("@")[0]
    name_part = local_part[:3].upper()
    characters = string.ascii_uppercase + string.digits
    random_part = "".join(secrets.choice(characters) for _ in range(3))
    return f"{prefix}{name_part}{random_part}"

def referral_id(user_id: str, moment: datetime) -> str:
    return f"{user_id}_{epoch_millis(moment)}"

def referral_request_id(student_id: str, professional_id: str, moment: datetime) -> str:
    return f"{student_id}_to_{professional_id}_{epoch_millis(moment)}"

def generate_payment_reference() -> str:
    return "PAY" + secrets.token_hex(6).upper()

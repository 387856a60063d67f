"""Utilities package"""

from .validators import validate_email_address, require_email, require_text, optional_text
from .helpers import (
    epoch_millis,
    generate_referral_code,
    generate_payment_reference,
    referral_id,
    referral_request_id,
)

__all__ = [
    "validate_email_address",
    "require_email",
    "require_text",
    "optional_text",
    "epoch_millis",
    "generate_referral_code",
    "generate_payment_reference",
    "referral_id",
    "referral_request_id",
]

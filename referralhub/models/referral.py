"""Referral system models"""

import enum

from .base import TimestampedDocument
from .user import UserRole

class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"

class Referral(TimestampedDocument):
    """Self-tracked outreach record, never confirmed by a counterparty"""

    id: str
    referrer_id: str
    referrer_type: UserRole
    referee_email: str
    referee_name: str
    job_type: str
    status: ReferralStatus = ReferralStatus.PENDING

"""Referral offer model"""

import enum

from .base import TimestampedDocument

class ReferralOfferStatus(str, enum.Enum):
    OFFERED = "offered"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"

class ReferralOfferAction(str, enum.Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    COMPLETE = "complete"

class ReferralOffer(TimestampedDocument):
    """Professional-initiated proposal to a specific student"""

    id: str
    professional_id: str
    professional_name: str = ""
    professional_email: str = ""
    student_id: str
    student_name: str = ""
    student_email: str = ""
    job_position: str
    company: str
    message: str = ""
    status: ReferralOfferStatus = ReferralOfferStatus.OFFERED
    type: str = "professional_initiated"

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.professional_id)

"""Referral request model with status lifecycle"""

from datetime import datetime
from typing import Optional
import enum

from .base import TimestampedDocument

class ReferralRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PAYMENT_REQUESTED = "payment_requested"
    PAYMENT_ACCEPTED = "payment_accepted"
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_COMPLETED = "payment_completed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ReferralRequestAction(str, enum.Enum):
    ACCEPT = "accept"
    REQUEST_PAYMENT = "request_payment"
    DECLINE = "decline"
    ACCEPT_PAYMENT = "accept_payment"
    REJECT_PAYMENT = "reject_payment"
    COMPLETE_PAYMENT = "complete_payment"
    COMPLETE = "complete"
    CANCEL = "cancel"

class ReferralRequest(TimestampedDocument):
    """Student-initiated ask to a specific professional"""

    id: str
    student_id: str
    student_name: str = ""
    student_email: str = ""
    professional_id: str
    professional_name: str = ""
    job_position: str
    company: str
    message: str = ""
    status: ReferralRequestStatus = ReferralRequestStatus.PENDING

    # Professional response
    payment_required: Optional[bool] = None
    payment_amount: Optional[float] = None
    professional_message: Optional[str] = None

    # Payment
    payment_method: Optional[str] = None
    upi_id: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_date: Optional[datetime] = None

    # Completion / cancellation
    completion_message: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.professional_id)

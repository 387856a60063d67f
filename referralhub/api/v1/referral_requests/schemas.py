"""
Referral request schemas for request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

from referralhub.models.referral_request import (
    ReferralRequest,
    ReferralRequestAction,
    ReferralRequestStatus,
)
from .state_machine import ReferralRequestStateMachine

_state_machine = ReferralRequestStateMachine()

class ReferralRequestCreate(BaseModel):
    """Schema for creating a referral request"""
    professional_id: str = Field(..., min_length=1)
    job_position: str = Field(..., max_length=200)
    company: str = Field(..., max_length=200)
    message: Optional[str] = Field(None, max_length=2000)

class ProfessionalResponse(BaseModel):
    """Professional's answer to a pending request"""
    action: Literal["accept", "request_payment", "decline"]
    amount: Optional[float] = None
    message: Optional[str] = Field(None, max_length=2000)

class PaymentDecision(BaseModel):
    """Student's answer to a payment demand"""
    action: Literal["accept", "reject"]

class CompleteRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=2000)

class CancelRequest(BaseModel):
    """Request to cancel a referral request"""
    reason: str = Field(..., max_length=500)

class ReferralRequestResponse(BaseModel):
    """Schema for referral request response"""
    id: str
    student_id: str
    student_name: str
    student_email: str
    professional_id: str
    professional_name: str
    job_position: str
    company: str
    message: str
    status: ReferralRequestStatus

    payment_required: Optional[bool] = None
    payment_amount: Optional[float] = None
    professional_message: Optional[str] = None
    payment_method: Optional[str] = None
    upi_id: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_date: Optional[datetime] = None

    completion_message: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    # Derived
    valid_actions: List[ReferralRequestAction] = []
    can_cancel: bool = False

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @classmethod
    def from_request(cls, request: ReferralRequest) -> "ReferralRequestResponse":
        return cls(
            **request.model_dump(),
            valid_actions=_state_machine.get_valid_actions(request.status),
            can_cancel=_state_machine.is_cancellable(request.status)
        )

class ReferralRequestListResponse(BaseModel):
    items: List[ReferralRequestResponse]
    total: int

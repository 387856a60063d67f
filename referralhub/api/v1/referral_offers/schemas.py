"""
Referral offer schemas
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

from referralhub.models.referral_offer import ReferralOfferStatus

class ReferralOfferCreate(BaseModel):
    """Schema for creating a referral offer"""
    student_id: str = Field(..., min_length=1)
    job_position: str = Field(..., max_length=200)
    company: str = Field(..., max_length=200)
    message: Optional[str] = Field(None, max_length=2000)

class OfferDecision(BaseModel):
    action: Literal["accept", "decline"]

class ReferralOfferResponse(BaseModel):
    """Schema for referral offer response"""
    id: str
    professional_id: str
    professional_name: str
    professional_email: str
    student_id: str
    student_name: str
    student_email: str
    job_position: str
    company: str
    message: str
    status: ReferralOfferStatus
    type: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class ReferralOfferListResponse(BaseModel):
    items: List[ReferralOfferResponse]
    total: int

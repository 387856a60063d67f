"""
Referral log schemas
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from referralhub.models.referral import ReferralStatus
from referralhub.models.user import UserRole

class ReferralCreate(BaseModel):
    referee_email: str = Field(..., max_length=254)
    referee_name: Optional[str] = Field(None, max_length=200)
    job_type: Optional[str] = Field(None, max_length=200)

class ReferralStatusUpdate(BaseModel):
    status: ReferralStatus

class ReferralResponse(BaseModel):
    id: str
    referrer_id: str
    referrer_type: UserRole
    referee_email: str
    referee_name: str
    job_type: str
    status: ReferralStatus
    created_at: datetime
    updated_at: datetime

class ReferralListResponse(BaseModel):
    items: List[ReferralResponse]
    total: int

class ReferralCodeResponse(BaseModel):
    referral_code: str

"""
Payment schemas
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from referralhub.models.payment import PaymentMethod

class PaymentComplete(BaseModel):
    """Schema for paying a referral request"""
    request_id: str = Field(..., min_length=1)
    method: PaymentMethod = PaymentMethod.UPI
    upi_id: Optional[str] = Field(None, max_length=100)

class PaymentResponse(BaseModel):
    request_id: str
    method: PaymentMethod
    upi_id: Optional[str] = None
    amount: float
    currency: str
    reference: str
    completed_at: datetime

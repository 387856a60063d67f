"""Payment models"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
import enum

class PaymentMethod(str, enum.Enum):
    UPI = "upi"
    CARD = "card"
    BANK = "bank"

class PaymentRecord(BaseModel):
    """
    Simulated payment attached to a referral request

    Not persisted on its own; its fields are copied onto the request.
    """

    request_id: str
    method: PaymentMethod
    upi_handle: Optional[str] = None
    amount: float
    currency: str = "INR"
    reference: str
    completed_at: datetime

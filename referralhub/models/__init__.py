"""Document models"""

from .base import Document, TimestampedDocument, utcnow
from .user import UserProfile, UserRole
from .referral import Referral, ReferralStatus
from .referral_request import ReferralRequest, ReferralRequestStatus, ReferralRequestAction
from .referral_offer import ReferralOffer, ReferralOfferStatus, ReferralOfferAction
from .payment import PaymentMethod, PaymentRecord

__all__ = [
    "Document",
    "TimestampedDocument",
    "utcnow",
    "UserProfile",
    "UserRole",
    "Referral",
    "ReferralStatus",
    "ReferralRequest",
    "ReferralRequestStatus",
    "ReferralRequestAction",
    "ReferralOffer",
    "ReferralOfferStatus",
    "ReferralOfferAction",
    "PaymentMethod",
    "PaymentRecord",
]

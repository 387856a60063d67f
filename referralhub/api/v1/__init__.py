"""API v1 routes aggregation"""

from fastapi import APIRouter

from .auth.router import router as auth_router
from .users.router import router as users_router
from .referrals.router import router as referrals_router
from .referral_requests.router import router as referral_requests_router
from .referral_offers.router import router as referral_offers_router
from .payments.router import router as payments_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(referrals_router, prefix="/referrals", tags=["Referrals"])
api_router.include_router(referral_requests_router, prefix="/referral-requests", tags=["Referral Requests"])
api_router.include_router(referral_offers_router, prefix="/referral-offers", tags=["Referral Offers"])
api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])

# Export router
router = api_router

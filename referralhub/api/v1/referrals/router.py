"""
Referral log API routes
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from referralhub.core.database import get_store
from referralhub.core.security import get_current_profile
from referralhub.models.referral import Referral, ReferralStatus
from referralhub.models.user import UserProfile
from referralhub.services.document_store import DocumentStore
from .schemas import (
    ReferralCodeResponse,
    ReferralCreate,
    ReferralListResponse,
    ReferralResponse,
    ReferralStatusUpdate,
)
from .services import ReferralService

router = APIRouter()

def _to_response(referral: Referral) -> ReferralResponse:
    return ReferralResponse.model_validate(referral.model_dump())

@router.post("/", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
async def create_referral(
    referral_data: ReferralCreate,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Log a referral"""
    service = ReferralService(store)
    referral = await service.create_referral(
        user=current_user,
        referee_email=referral_data.referee_email,
        referee_name=referral_data.referee_name,
        job_type=referral_data.job_type
    )
    return _to_response(referral)

@router.get("/", response_model=ReferralListResponse)
async def list_referrals(
    status: Optional[ReferralStatus] = None,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """List current user's referrals"""
    service = ReferralService(store)
    items = [_to_response(r) for r in await service.list_referrals(current_user.uid, status)]
    return ReferralListResponse(items=items, total=len(items))

@router.get("/stats")
async def get_referral_stats(current_user: UserProfile = Depends(get_current_profile)):
    """Get referral statistics"""
    return {
        "referrals_generated": current_user.referrals_generated,
        "active_referrals": current_user.active_referrals,
        "successful_referrals": current_user.successful_referrals,
        "total_rewards": current_user.total_rewards,
        "sent_requests": current_user.sent_requests,
    }

@router.get("/code", response_model=ReferralCodeResponse)
async def get_referral_code(current_user: UserProfile = Depends(get_current_profile)):
    """Get user referral code"""
    return ReferralCodeResponse(referral_code=current_user.referral_code)

@router.patch("/{referral_id}/status", response_model=ReferralResponse)
async def update_referral_status(
    referral_id: str,
    status_update: ReferralStatusUpdate,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralService(store)
    referral = await service.update_status(current_user.uid, referral_id, status_update.status)
    return _to_response(referral)

"""
Referral offer API routes
"""

from fastapi import APIRouter, Depends, status

from referralhub.core.database import get_store
from referralhub.core.security import get_current_profile, require_professional, require_student
from referralhub.models.referral_offer import ReferralOffer, ReferralOfferAction
from referralhub.models.user import UserProfile
from referralhub.services.document_store import DocumentStore
from .schemas import (
    OfferDecision,
    ReferralOfferCreate,
    ReferralOfferListResponse,
    ReferralOfferResponse,
)
from .services import ReferralOfferService

router = APIRouter()

def _to_response(offer: ReferralOffer) -> ReferralOfferResponse:
    return ReferralOfferResponse.model_validate(offer.model_dump())

@router.post(
    "/",
    response_model=ReferralOfferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create referral offer",
    description="Offer a referral to a student (Professional only)"
)
async def create_referral_offer(
    offer_data: ReferralOfferCreate,
    current_user: UserProfile = Depends(require_professional),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    offer = await service.create_offer(
        professional=current_user,
        student_id=offer_data.student_id,
        job_position=offer_data.job_position,
        company=offer_data.company,
        message=offer_data.message
    )
    return _to_response(offer)

@router.get("/received", response_model=ReferralOfferListResponse, summary="List received offers")
async def list_received_offers(
    current_user: UserProfile = Depends(require_student),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    items = [_to_response(o) for o in await service.list_received(current_user.uid)]
    return ReferralOfferListResponse(items=items, total=len(items))

@router.get("/sent", response_model=ReferralOfferListResponse, summary="List sent offers")
async def list_sent_offers(
    current_user: UserProfile = Depends(require_professional),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    items = [_to_response(o) for o in await service.list_sent(current_user.uid)]
    return ReferralOfferListResponse(items=items, total=len(items))

@router.get("/{offer_id}", response_model=ReferralOfferResponse, summary="Get referral offer")
async def get_referral_offer(
    offer_id: str,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    return _to_response(await service.get_offer(offer_id, actor_id=current_user.uid))

@router.post(
    "/{offer_id}/respond",
    response_model=ReferralOfferResponse,
    summary="Respond to referral offer",
    description="Accept or decline an offer (Student only)"
)
async def respond_to_offer(
    offer_id: str,
    decision: OfferDecision,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    offer = await service.respond(offer_id, current_user.uid, ReferralOfferAction(decision.action))
    return _to_response(offer)

@router.post(
    "/{offer_id}/complete",
    response_model=ReferralOfferResponse,
    summary="Complete referral offer",
    description="Mark an accepted offer as completed (Professional only)"
)
async def complete_offer(
    offer_id: str,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralOfferService(store)
    return _to_response(await service.complete(offer_id, current_user.uid))

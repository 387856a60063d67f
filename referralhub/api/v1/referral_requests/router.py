"""
Referral request API routes
"""

from fastapi import APIRouter, Depends, status
import logging

from referralhub.core.database import get_store
from referralhub.core.security import get_current_profile, require_professional, require_student
from referralhub.models.referral_request import ReferralRequestAction
from referralhub.models.user import UserProfile
from referralhub.services.document_store import DocumentStore
from .schemas import (
    CancelRequest,
    CompleteRequest,
    PaymentDecision,
    ProfessionalResponse,
    ReferralRequestCreate,
    ReferralRequestListResponse,
    ReferralRequestResponse,
)
from .services import ReferralRequestService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "/",
    response_model=ReferralRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create referral request",
    description="Ask a professional for a referral (Student only)"
)
async def create_referral_request(
    request_data: ReferralRequestCreate,
    current_user: UserProfile = Depends(require_student),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    request = await service.create_request(
        student=current_user,
        professional_id=request_data.professional_id,
        job_position=request_data.job_position,
        company=request_data.company,
        message=request_data.message
    )
    return ReferralRequestResponse.from_request(request)

@router.get(
    "/sent",
    response_model=ReferralRequestListResponse,
    summary="List sent requests",
    description="Requests the current student has sent, newest first"
)
async def list_sent_requests(
    current_user: UserProfile = Depends(require_student),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    requests = await service.list_sent(current_user.uid)
    items = [ReferralRequestResponse.from_request(r) for r in requests]
    return ReferralRequestListResponse(items=items, total=len(items))

@router.get(
    "/received",
    response_model=ReferralRequestListResponse,
    summary="List received requests",
    description="Requests addressed to the current professional, newest first"
)
async def list_received_requests(
    current_user: UserProfile = Depends(require_professional),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    requests = await service.list_received(current_user.uid)
    items = [ReferralRequestResponse.from_request(r) for r in requests]
    return ReferralRequestListResponse(items=items, total=len(items))

@router.get(
    "/{request_id}",
    response_model=ReferralRequestResponse,
    summary="Get referral request"
)
async def get_referral_request(
    request_id: str,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Get request details (participants only)"""
    service = ReferralRequestService(store)
    request = await service.get_request(request_id, actor_id=current_user.uid)
    return ReferralRequestResponse.from_request(request)

@router.post(
    "/{request_id}/respond",
    response_model=ReferralRequestResponse,
    summary="Respond to referral request",
    description="Accept, decline or ask for payment (Professional only)"
)
async def respond_to_request(
    request_id: str,
    response_data: ProfessionalResponse,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    request = await service.professional_respond(
        request_id=request_id,
        actor_id=current_user.uid,
        action=ReferralRequestAction(response_data.action),
        amount=response_data.amount,
        message=response_data.message
    )
    return ReferralRequestResponse.from_request(request)

@router.post(
    "/{request_id}/payment-decision",
    response_model=ReferralRequestResponse,
    summary="Answer payment demand",
    description="Accept or reject the professional's payment demand (Student only)"
)
async def respond_to_payment(
    request_id: str,
    decision: PaymentDecision,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    request = await service.student_respond_to_payment(
        request_id=request_id,
        actor_id=current_user.uid,
        action=decision.action
    )
    return ReferralRequestResponse.from_request(request)

@router.post(
    "/{request_id}/complete",
    response_model=ReferralRequestResponse,
    summary="Mark request complete"
)
async def complete_request(
    request_id: str,
    complete_data: CompleteRequest,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = ReferralRequestService(store)
    request = await service.mark_complete(
        request_id=request_id,
        actor_id=current_user.uid,
        note=complete_data.note
    )
    return ReferralRequestResponse.from_request(request)

@router.post(
    "/{request_id}/cancel",
    response_model=ReferralRequestResponse,
    summary="Cancel referral request"
)
async def cancel_request(
    request_id: str,
    cancel_data: CancelRequest,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    """Cancel request"""
    service = ReferralRequestService(store)
    request = await service.cancel(
        request_id=request_id,
        actor_id=current_user.uid,
        reason=cancel_data.reason
    )
    return ReferralRequestResponse.from_request(request)

"""
Payment API routes
"""

from fastapi import APIRouter, Depends

from referralhub.core.database import get_store
from referralhub.core.security import get_current_profile
from referralhub.models.user import UserProfile
from referralhub.services.document_store import DocumentStore
from .schemas import PaymentComplete, PaymentResponse
from .services import PaymentService

router = APIRouter()

@router.post(
    "/complete",
    response_model=PaymentResponse,
    summary="Complete payment",
    description="Pay for a referral request whose payment demand was accepted"
)
async def complete_payment(
    payment_data: PaymentComplete,
    current_user: UserProfile = Depends(get_current_profile),
    store: DocumentStore = Depends(get_store)
):
    service = PaymentService(store)
    record = await service.complete_payment(
        request_id=payment_data.request_id,
        actor_id=current_user.uid,
        method=payment_data.method,
        upi_handle=payment_data.upi_id
    )
    return PaymentResponse(
        request_id=record.request_id,
        method=record.method,
        upi_id=record.upi_handle,
        amount=record.amount,
        currency=record.currency,
        reference=record.reference,
        completed_at=record.completed_at
    )

"""
Payment service layer
Settles the payment step of a referral request
"""

from typing import Optional
import logging
import uuid

from referralhub.core.exceptions import PaymentInProgressError, ValidationError
from referralhub.models.base import utcnow
from referralhub.models.payment import PaymentMethod, PaymentRecord
from referralhub.models.referral_request import ReferralRequestAction
from referralhub.core.config import settings
from referralhub.services.analytics import AnalyticsService
from referralhub.services.document_store import DocumentStore, PreconditionFailed
from referralhub.api.v1.referral_requests.services import ReferralRequestService
from .gateway import PaymentGateway, SimulatedPaymentGateway

logger = logging.getLogger(__name__)

# Holds the id of the payment attempt currently charging
CLAIM_FIELD = "paymentClaim"

class PaymentService:
    """Payment service for processing referral payments"""

    def __init__(
        self,
        store: DocumentStore,
        gateway: Optional[PaymentGateway] = None,
        analytics: Optional[AnalyticsService] = None
    ):
        self.store = store
        self.gateway = gateway or SimulatedPaymentGateway()
        self.analytics = analytics or AnalyticsService(store)
        self.requests = ReferralRequestService(store, analytics=self.analytics)

    async def complete_payment(
        self,
        request_id: str,
        actor_id: str,
        method: PaymentMethod,
        upi_handle: Optional[str] = None
    ) -> PaymentRecord:
        """
        Pay for an accepted payment demand

        Args:
            request_id: Request ID
            actor_id: Paying student uid
            method: Payment method
            upi_handle: UPI id, required when paying by UPI

        Returns:
            Payment record

        Raises:
            ValidationError: If method or UPI handle is invalid
            AuthorizationError: If actor is not the request's student
            InvalidTransitionError: If the request is not in payment_accepted
            PaymentInProgressError: If another payment for the request is running
        """
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Unsupported payment method: {method}", error_code="INVALID_PAYMENT_METHOD")

        upi_handle = upi_handle.strip() if upi_handle else None
        if method == PaymentMethod.UPI and not upi_handle:
            raise ValidationError("UPI ID is required for UPI payments", error_code="UPI_ID_REQUIRED")
        if upi_handle and "@" not in upi_handle:
            raise ValidationError("UPI ID is invalid", error_code="INVALID_UPI_ID")

        # Reject before charging
        request = await self.requests.get_request(request_id)
        self.requests.check_transition(request, actor_id, ReferralRequestAction.COMPLETE_PAYMENT)

        claim = await self._claim(request_id, actor_id)

        amount = request.payment_amount or 0
        try:
            reference = await self.gateway.charge(
                amount,
                method,
                upi_handle=upi_handle,
                currency=settings.PAYMENT_CURRENCY
            )
        except Exception:
            logger.error(f"Charge failed for request {request_id}, releasing payment claim")
            await self._release(request_id, claim)
            raise

        paid_at = utcnow()
        try:
            await self.requests.apply_transition(
                request_id,
                actor_id,
                ReferralRequestAction.COMPLETE_PAYMENT,
                {
                    "paymentMethod": method.value,
                    "upiId": upi_handle,
                    "paymentReference": reference,
                    "paymentDate": paid_at,
                }
            )
        except Exception:
            logger.error(f"Payment {reference} charged but request {request_id} was not updated")
            raise

        logger.info(f"Payment {reference} completed for request {request_id}")
        await self.analytics.log_event(
            "payment_completed",
            {"request_id": request_id, "amount": amount, "method": method.value},
            user_id=actor_id
        )

        return PaymentRecord(
            request_id=request_id,
            method=method,
            upi_handle=upi_handle,
            amount=amount,
            currency=settings.PAYMENT_CURRENCY,
            reference=reference,
            completed_at=paid_at
        )

    async def _claim(self, request_id: str, actor_id: str) -> str:
        """
        Mark the request as being paid so only one charge can run

        The claim stays on the request after a successful payment.

        Raises:
            PaymentInProgressError: If another payment holds the claim
        """
        claim = uuid.uuid4().hex
        try:
            await self.store.compare_and_update(
                self.requests.collection,
                request_id,
                CLAIM_FIELD,
                [None],
                {CLAIM_FIELD: claim, "updatedAt": utcnow()}
            )
        except PreconditionFailed:
            logger.warning(f"Payment for request {request_id} already claimed, rejecting {actor_id}")
            raise PaymentInProgressError()
        return claim

    async def _release(self, request_id: str, claim: str) -> None:
        try:
            await self.store.compare_and_update(
                self.requests.collection,
                request_id,
                CLAIM_FIELD,
                [claim],
                {CLAIM_FIELD: None}
            )
        except PreconditionFailed:
            logger.error(f"Payment claim on request {request_id} changed while charging")

"""
Referral request service layer
Creates requests and applies lifecycle transitions
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional
import logging

from referralhub.core.config import settings
from referralhub.core.exceptions import (
    AuthorizationError,
    DuplicateDocumentError,
    InvalidPaymentAmountError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from referralhub.models.base import utcnow
from referralhub.models.referral_request import (
    ReferralRequest,
    ReferralRequestAction,
    ReferralRequestStatus,
)
from referralhub.models.user import UserProfile, UserRole
from referralhub.services.analytics import AnalyticsService
from referralhub.services.document_store import (
    DocumentExists,
    DocumentStore,
    Filter,
    Ordering,
    PreconditionFailed,
)
from referralhub.services.user_service import ProfileService
from referralhub.utils.helpers import referral_request_id
from referralhub.utils.validators import optional_text, require_text
from .state_machine import ReferralRequestStateMachine

logger = logging.getLogger(__name__)

PROFESSIONAL_RESPONSES = (
    ReferralRequestAction.ACCEPT,
    ReferralRequestAction.REQUEST_PAYMENT,
    ReferralRequestAction.DECLINE,
)
PAYMENT_RESPONSES = {
    "accept": ReferralRequestAction.ACCEPT_PAYMENT,
    "reject": ReferralRequestAction.REJECT_PAYMENT,
}

class ReferralRequestService:
    """Referral request service for business logic"""

    def __init__(
        self,
        store: DocumentStore,
        profiles: Optional[ProfileService] = None,
        analytics: Optional[AnalyticsService] = None
    ):
        self.store = store
        self.analytics = analytics or AnalyticsService(store)
        self.profiles = profiles or ProfileService(store, analytics=self.analytics)
        self.state_machine = ReferralRequestStateMachine()
        self.collection = settings.REFERRAL_REQUESTS_COLLECTION

    async def create_request(
        self,
        student: UserProfile,
        professional_id: str,
        job_position: str,
        company: str,
        message: Optional[str] = None
    ) -> ReferralRequest:
        """
        Create a pending referral request from a student to a professional

        Args:
            student: Profile of the requesting student
            professional_id: Target professional uid
            job_position: Position the student wants a referral for
            company: Company of the position
            message: Optional note to the professional

        Returns:
            Created request

        Raises:
            ValidationError: If position or company is blank or the target is not a professional
            AuthorizationError: If the caller is not a student
            NotFoundError: If the professional does not exist
        """
        job_position = require_text(job_position, "Job position")
        company = require_text(company, "Company")

        if not student.is_student:
            raise AuthorizationError("Only students can send referral requests")

        professional = await self.profiles.get_profile(professional_id)
        if not professional.is_professional:
            raise ValidationError("Referral requests can only be sent to professionals")

        now = utcnow()
        request = ReferralRequest(
            id=referral_request_id(student.uid, professional.uid, now),
            student_id=student.uid,
            student_name=student.name,
            student_email=student.email,
            professional_id=professional.uid,
            professional_name=professional.name,
            job_position=job_position,
            company=company,
            message=optional_text(message),
            status=ReferralRequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        for attempt in range(settings.ID_ALLOCATION_ATTEMPTS):
            request.id = referral_request_id(student.uid, professional.uid, now + timedelta(milliseconds=attempt))
            try:
                await self.store.create(self.collection, request.id, request.to_document())
                break
            except DocumentExists:
                logger.warning(f"Referral request id {request.id} is taken, retrying")
        else:
            raise DuplicateDocumentError("Could not allocate a referral request id")

        await self.profiles.increment_counter(student.uid, "sent_requests")

        logger.info(f"Referral request {request.id} created by {student.uid}")
        await self.analytics.log_event(
            "sent_referral_request",
            {"professional_id": professional.uid, "company": company},
            user_id=student.uid
        )
        return request

    async def get_request(self, request_id: str, actor_id: Optional[str] = None) -> ReferralRequest:
        """
        Get request details

        Raises:
            NotFoundError: If request not found
            AuthorizationError: If actor is not a participant
        """
        data = await self.store.get(self.collection, request_id)
        if data is None:
            raise NotFoundError("Referral request not found")
        request = ReferralRequest.from_document(data)

        if actor_id and not request.is_participant(actor_id):
            raise AuthorizationError("You don't have access to this referral request")
        return request

    async def list_sent(self, student_id: str) -> List[ReferralRequest]:
        """Requests sent by a student, newest first"""
        return await self._list("studentId", student_id)

    async def list_received(self, professional_id: str) -> List[ReferralRequest]:
        """Requests received by a professional, newest first"""
        return await self._list("professionalId", professional_id)

    async def _list(self, field: str, user_id: str) -> List[ReferralRequest]:
        documents = await self.store.query(
            self.collection,
            filters=[Filter(field, "==", user_id)],
            order_by=Ordering("createdAt", descending=True)
        )
        return [ReferralRequest.from_document(doc) for doc in documents]

    def party_of(self, request: ReferralRequest, actor_id: str) -> Optional[UserRole]:
        """Which side of the request the actor is on"""
        if actor_id == request.student_id:
            return UserRole.STUDENT
        if actor_id == request.professional_id:
            return UserRole.PROFESSIONAL
        return None

    def check_transition(
        self,
        request: ReferralRequest,
        actor_id: str,
        action: ReferralRequestAction
    ) -> ReferralRequestStatus:
        """Resolve the next status without writing anything"""
        party = self.party_of(request, actor_id)
        if party is None:
            raise AuthorizationError("You are not a participant of this referral request")
        return self.state_machine.resolve(request.status, action, party)

    async def _precheck(self, request_id: str, actor_id: str, action: ReferralRequestAction) -> None:
        request = await self.get_request(request_id)
        self.check_transition(request, actor_id, action)

    async def apply_transition(
        self,
        request_id: str,
        actor_id: str,
        action: ReferralRequestAction,
        changes: Optional[Dict[str, Any]] = None
    ) -> ReferralRequest:
        """
        Validate and persist one lifecycle transition

        The write only lands if the stored status is still the one the
        transition was validated against, so a transition applies at most
        once under concurrent callers.

        Raises:
            NotFoundError: If request not found
            AuthorizationError: If actor may not perform action
            InvalidTransitionError: If action is not permitted from the stored status
        """
        request = await self.get_request(request_id)
        target = self.check_transition(request, actor_id, action)

        data = {
            **(changes or {}),
            "status": target.value,
            "updatedAt": utcnow(),
        }
        try:
            updated = await self.store.compare_and_update(
                self.collection,
                request_id,
                "status",
                [request.status.value],
                data
            )
        except PreconditionFailed as e:
            logger.warning(f"Lost race on request {request_id}: status is now {e.current}")
            raise InvalidTransitionError(e.current, action.value)

        logger.info(
            f"Referral request {request_id}: {request.status.value} -> {target.value} "
            f"({action.value} by {actor_id})"
        )
        return ReferralRequest.from_document(updated)

    async def professional_respond(
        self,
        request_id: str,
        actor_id: str,
        action: ReferralRequestAction,
        amount: Optional[float] = None,
        message: Optional[str] = None
    ) -> ReferralRequest:
        """
        Professional answers a pending request

        Args:
            request_id: Request ID
            actor_id: Acting professional uid
            action: accept, request_payment or decline
            amount: Payment amount, required for request_payment
            message: Optional response message

        Returns:
            Updated request
        """
        if action not in [a.value for a in PROFESSIONAL_RESPONSES]:
            raise ValidationError(f"Unsupported response: {action}")
        action = ReferralRequestAction(action)

        # Status and party are checked before the amount
        await self._precheck(request_id, actor_id, action)

        changes: Dict[str, Any] = {}
        if action == ReferralRequestAction.REQUEST_PAYMENT:
            if amount is None or amount <= 0:
                raise InvalidPaymentAmountError()
            changes["paymentRequired"] = True
            changes["paymentAmount"] = float(amount)
        elif action == ReferralRequestAction.ACCEPT:
            changes["paymentRequired"] = False

        if message and message.strip():
            changes["professionalMessage"] = message.strip()

        request = await self.apply_transition(request_id, actor_id, action, changes)

        await self.analytics.log_event(
            "responded_to_request",
            {"request_id": request_id, "action": action.value, "amount": request.payment_amount},
            user_id=actor_id
        )
        return request

    async def student_respond_to_payment(
        self,
        request_id: str,
        actor_id: str,
        action: str
    ) -> ReferralRequest:
        """Student accepts or rejects a payment demand"""
        transition_action = PAYMENT_RESPONSES.get(getattr(action, "value", action))
        if transition_action is None:
            raise ValidationError(f"Unsupported payment response: {action}")

        request = await self.apply_transition(request_id, actor_id, transition_action)

        event = (
            "accepted_payment_request"
            if transition_action == ReferralRequestAction.ACCEPT_PAYMENT
            else "rejected_payment_request"
        )
        await self.analytics.log_event(
            event,
            {"professional_id": request.professional_id, "amount": request.payment_amount},
            user_id=actor_id
        )
        return request

    async def mark_complete(
        self,
        request_id: str,
        actor_id: str,
        note: Optional[str] = None
    ) -> ReferralRequest:
        """Either participant confirms the referral was given"""
        now = utcnow()
        request = await self.apply_transition(
            request_id,
            actor_id,
            ReferralRequestAction.COMPLETE,
            {
                "completionMessage": optional_text(note),
                "completedAt": now,
                "completedBy": actor_id,
            }
        )

        await self.analytics.log_event(
            "marked_request_complete",
            {"request_id": request_id},
            user_id=actor_id
        )
        return request

    async def cancel(self, request_id: str, actor_id: str, reason: str) -> ReferralRequest:
        """Either participant withdraws a request that has not progressed too far"""
        await self._precheck(request_id, actor_id, ReferralRequestAction.CANCEL)
        reason = require_text(reason, "Cancellation reason")
        now = utcnow()
        request = await self.apply_transition(
            request_id,
            actor_id,
            ReferralRequestAction.CANCEL,
            {
                "cancelReason": reason,
                "cancelledAt": now,
                "cancelledBy": actor_id,
            }
        )

        await self.analytics.log_event(
            "cancelled_request",
            {"request_id": request_id},
            user_id=actor_id
        )
        return request

"""
Referral offer service layer
"""

from typing import List, Optional
import logging
import uuid

from referralhub.core.config import settings
from referralhub.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from referralhub.models.base import utcnow
from referralhub.models.referral_offer import (
    ReferralOffer,
    ReferralOfferAction,
    ReferralOfferStatus,
)
from referralhub.models.user import UserProfile, UserRole
from referralhub.services.analytics import AnalyticsService
from referralhub.services.document_store import DocumentStore, Filter, Ordering, PreconditionFailed
from referralhub.services.user_service import ProfileService
from referralhub.utils.validators import optional_text, require_text
from .state_machine import ReferralOfferStateMachine

logger = logging.getLogger(__name__)

OFFER_EVENTS = {
    ReferralOfferAction.ACCEPT: "accepted_referral_offer",
    ReferralOfferAction.DECLINE: "declined_referral_offer",
    ReferralOfferAction.COMPLETE: "completed_referral_offer",
}

class ReferralOfferService:
    """Referral offer service for business logic"""

    def __init__(
        self,
        store: DocumentStore,
        profiles: Optional[ProfileService] = None,
        analytics: Optional[AnalyticsService] = None
    ):
        self.store = store
        self.analytics = analytics or AnalyticsService(store)
        self.profiles = profiles or ProfileService(store, analytics=self.analytics)
        self.state_machine = ReferralOfferStateMachine()
        self.collection = settings.REFERRAL_OFFERS_COLLECTION

    async def create_offer(
        self,
        professional: UserProfile,
        student_id: str,
        job_position: str,
        company: str,
        message: Optional[str] = None
    ) -> ReferralOffer:
        """
        Offer a referral to a student

        Raises:
            ValidationError: If position or company is blank or the target is not a student
            AuthorizationError: If the caller is not a professional
            NotFoundError: If the student does not exist
        """
        job_position = require_text(job_position, "Job position")
        company = require_text(company, "Company")

        if not professional.is_professional:
            raise AuthorizationError("Only professionals can send referral offers")

        student = await self.profiles.get_profile(student_id)
        if not student.is_student:
            raise ValidationError("Referral offers can only be sent to students")

        now = utcnow()
        offer = ReferralOffer(
            id=uuid.uuid4().hex[:20],
            professional_id=professional.uid,
            professional_name=professional.name,
            professional_email=professional.email,
            student_id=student.uid,
            student_name=student.name,
            student_email=student.email,
            job_position=job_position,
            company=company,
            message=optional_text(message),
            status=ReferralOfferStatus.OFFERED,
            created_at=now,
            updated_at=now,
        )
        await self.store.set(self.collection, offer.id, offer.to_document())

        logger.info(f"Referral offer {offer.id} sent by {professional.uid} to {student.uid}")
        await self.analytics.log_event(
            "sent_referral_offer",
            {"student_id": student.uid, "job_position": job_position},
            user_id=professional.uid
        )
        return offer

    async def get_offer(self, offer_id: str, actor_id: Optional[str] = None) -> ReferralOffer:
        data = await self.store.get(self.collection, offer_id)
        if data is None:
            raise NotFoundError("Referral offer not found")
        data.setdefault("id", offer_id)
        offer = ReferralOffer.from_document(data)

        if actor_id and not offer.is_participant(actor_id):
            raise AuthorizationError("You don't have access to this referral offer")
        return offer

    async def list_received(self, student_id: str) -> List[ReferralOffer]:
        """Offers received by a student, newest first"""
        return await self._list("studentId", student_id)

    async def list_sent(self, professional_id: str) -> List[ReferralOffer]:
        """Offers sent by a professional, newest first"""
        return await self._list("professionalId", professional_id)

    async def _list(self, field: str, user_id: str) -> List[ReferralOffer]:
        documents = await self.store.query(
            self.collection,
            filters=[Filter(field, "==", user_id)],
            order_by=Ordering("createdAt", descending=True)
        )
        return [ReferralOffer.from_document(doc) for doc in documents]

    async def respond(self, offer_id: str, actor_id: str, action: ReferralOfferAction) -> ReferralOffer:
        """Student accepts or declines an offer"""
        if action not in (ReferralOfferAction.ACCEPT.value, ReferralOfferAction.DECLINE.value):
            raise ValidationError(f"Unsupported response: {action}")
        action = ReferralOfferAction(action)
        return await self._transition(offer_id, actor_id, action)

    async def complete(self, offer_id: str, actor_id: str) -> ReferralOffer:
        """Professional marks an accepted offer as done"""
        return await self._transition(offer_id, actor_id, ReferralOfferAction.COMPLETE)

    async def _transition(
        self,
        offer_id: str,
        actor_id: str,
        action: ReferralOfferAction
    ) -> ReferralOffer:
        offer = await self.get_offer(offer_id)
        if actor_id == offer.student_id:
            party = UserRole.STUDENT
        elif actor_id == offer.professional_id:
            party = UserRole.PROFESSIONAL
        else:
            raise AuthorizationError("You are not a participant of this referral offer")

        target = self.state_machine.resolve(offer.status, action, party)
        try:
            updated = await self.store.compare_and_update(
                self.collection,
                offer_id,
                "status",
                [offer.status.value],
                {"status": target.value, "updatedAt": utcnow()}
            )
        except PreconditionFailed as e:
            logger.warning(f"Lost race on offer {offer_id}: status is now {e.current}")
            raise InvalidTransitionError(e.current, action.value)

        logger.info(f"Referral offer {offer_id}: {offer.status.value} -> {target.value}")

        params = {"company": offer.company}
        if party == UserRole.STUDENT:
            params["professional_id"] = offer.professional_id
        else:
            params["student_id"] = offer.student_id
        await self.analytics.log_event(OFFER_EVENTS[action], params, user_id=actor_id)

        updated.setdefault("id", offer_id)
        return ReferralOffer.from_document(updated)

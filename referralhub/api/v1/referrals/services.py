"""
Referral log service
Informal, self-tracked referrals with no counterparty confirmation
"""

from datetime import timedelta
from typing import List, Optional
import logging

from referralhub.core.config import settings
from referralhub.core.exceptions import (
    AuthorizationError,
    DuplicateDocumentError,
    NotFoundError,
    ValidationError,
)
from referralhub.models.base import utcnow
from referralhub.models.referral import Referral, ReferralStatus
from referralhub.models.user import UserProfile
from referralhub.services.analytics import AnalyticsService
from referralhub.services.document_store import DocumentExists, DocumentStore, Filter, Ordering
from referralhub.services.user_service import ProfileService
from referralhub.utils.helpers import referral_id
from referralhub.utils.validators import require_email

logger = logging.getLogger(__name__)

DEFAULT_JOB_TYPE = "Not specified"

class ReferralService:
    """Service class for referral log operations"""

    def __init__(
        self,
        store: DocumentStore,
        profiles: Optional[ProfileService] = None,
        analytics: Optional[AnalyticsService] = None
    ):
        self.store = store
        self.analytics = analytics or AnalyticsService(store)
        self.profiles = profiles or ProfileService(store, analytics=self.analytics)
        self.collection = settings.REFERRALS_COLLECTION

    async def create_referral(
        self,
        user: UserProfile,
        referee_email: str,
        referee_name: Optional[str] = None,
        job_type: Optional[str] = None
    ) -> Referral:
        """
        Log a referral and bump the user's referralsGenerated counter

        Args:
            user: Referrer profile
            referee_email: Contact email
            referee_name: Contact name, defaults to the email local part
            job_type: Free-form job label

        Returns:
            Created referral
        """
        referee_email = require_email(referee_email, "Referee email")
        referee_name = (referee_name or "").strip() or referee_email.split("@")[0]
        job_type = (job_type or "").strip() or DEFAULT_JOB_TYPE

        now = utcnow()
        referral = Referral(
            id=referral_id(user.uid, now),
            referrer_id=user.uid,
            referrer_type=user.user_type,
            referee_email=referee_email,
            referee_name=referee_name,
            job_type=job_type,
            status=ReferralStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        for attempt in range(settings.ID_ALLOCATION_ATTEMPTS):
            referral.id = referral_id(user.uid, now + timedelta(milliseconds=attempt))
            try:
                await self.store.create(self.collection, referral.id, referral.to_document())
                break
            except DocumentExists:
                logger.warning(f"Referral id {referral.id} is taken, retrying")
        else:
            raise DuplicateDocumentError("Could not allocate a referral id")

        await self.profiles.increment_counter(user.uid, "referrals_generated")

        logger.info(f"Referral {referral.id} created by {user.uid}")
        await self.analytics.log_event(
            "referral_created",
            {"job_type": job_type, "user_type": user.user_type.value},
            user_id=user.uid
        )
        return referral

    async def list_referrals(
        self,
        user_id: str,
        status: Optional[ReferralStatus] = None
    ) -> List[Referral]:
        """User's referrals, newest first"""
        filters = [Filter("referrerId", "==", user_id)]
        if status is not None:
            filters.append(Filter("status", "==", ReferralStatus(status).value))

        documents = await self.store.query(
            self.collection,
            filters=filters,
            order_by=Ordering("createdAt", descending=True)
        )
        return [Referral.from_document(doc) for doc in documents]

    async def update_status(
        self,
        user_id: str,
        referral_id: str,
        status: ReferralStatus
    ) -> Referral:
        """Owner moves a referral to any informal status"""
        try:
            status = ReferralStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid referral status: {status}")

        data = await self.store.get(self.collection, referral_id)
        if data is None:
            raise NotFoundError("Referral not found")
        referral = Referral.from_document(data)
        if referral.referrer_id != user_id:
            raise AuthorizationError("You can only update your own referrals")

        updated_at = utcnow()
        await self.store.update(
            self.collection,
            referral_id,
            {"status": status.value, "updatedAt": updated_at}
        )
        logger.info(f"Referral {referral_id} status set to {status.value}")
        return referral.model_copy(update={"status": status, "updated_at": updated_at})

"""User profile service"""

from typing import Any, Dict, List, Optional
from pathlib import Path
import logging

from referralhub.core.config import settings
from referralhub.core.exceptions import (
    NotFoundError,
    RoleChangeNotAllowedError,
    ValidationError,
)
from referralhub.models.base import utcnow
from referralhub.models.user import (
    COUNTER_FIELDS,
    PROFESSIONAL_FIELDS,
    STUDENT_FIELDS,
    UserProfile,
    UserRole,
)
from referralhub.services.analytics import AnalyticsService
from referralhub.services.auth_provider import AuthIdentity
from referralhub.services.document_store import DocumentStore, Filter, Ordering
from referralhub.services.storage import ObjectStore
from referralhub.utils.helpers import epoch_millis, generate_referral_code

logger = logging.getLogger(__name__)

COMMON_EDITABLE_FIELDS = ("display_name", "photo_url")

class ProfileService:
    """Service class for profile operations"""

    def __init__(
        self,
        store: DocumentStore,
        object_store: Optional[ObjectStore] = None,
        analytics: Optional[AnalyticsService] = None
    ):
        self.store = store
        self.object_store = object_store
        self.analytics = analytics or AnalyticsService(store)
        self.collection = settings.USERS_COLLECTION

    async def create_profile(
        self,
        identity: AuthIdentity,
        user_type: UserRole,
        additional_data: Optional[Dict[str, Any]] = None
    ) -> UserProfile:
        """
        Create the profile document for a newly signed-up user

        Only the fields belonging to the chosen role are kept from
        additional_data. The role cannot be changed afterwards.
        """
        additional_data = additional_data or {}
        role_fields = STUDENT_FIELDS if user_type == UserRole.STUDENT else PROFESSIONAL_FIELDS

        profile_data = {
            field: additional_data[field]
            for field in role_fields
            if additional_data.get(field) is not None
        }
        if user_type == UserRole.PROFESSIONAL and "skills" not in profile_data:
            profile_data["skills"] = []

        profile = UserProfile(
            uid=identity.uid,
            email=identity.email,
            user_type=user_type,
            display_name=additional_data.get("display_name") or "",
            photo_url=additional_data.get("photo_url") or "",
            referral_code=generate_referral_code(identity.email),
            **profile_data
        )

        await self.store.set(self.collection, profile.uid, profile.to_document())
        logger.info(f"Created {user_type.value} profile {profile.uid}")

        await self.analytics.log_event(
            "sign_up",
            {"method": "email", "user_type": user_type.value},
            user_id=profile.uid
        )
        return profile

    async def get_profile(self, uid: str) -> UserProfile:
        data = await self.store.get(self.collection, uid)
        if data is None:
            raise NotFoundError(f"No user profile found for {uid}")
        data.setdefault("uid", uid)
        return UserProfile.from_document(data)

    async def find_profile(self, uid: str) -> Optional[UserProfile]:
        data = await self.store.get(self.collection, uid)
        if data is None:
            return None
        data.setdefault("uid", uid)
        return UserProfile.from_document(data)

    async def update_profile(self, uid: str, changes: Dict[str, Any]) -> UserProfile:
        """
        Apply client-editable profile changes

        Raises:
            RoleChangeNotAllowedError: If changes try to switch user_type
            ValidationError: If changes touch counters or foreign role fields
        """
        profile = await self.get_profile(uid)

        requested_role = changes.pop("user_type", None)
        if requested_role is not None and requested_role != profile.user_type:
            raise RoleChangeNotAllowedError()

        forbidden = [field for field in changes if field in COUNTER_FIELDS]
        if forbidden:
            raise ValidationError(f"Fields are read-only: {', '.join(forbidden)}")

        role_fields = STUDENT_FIELDS if profile.is_student else PROFESSIONAL_FIELDS
        allowed = set(COMMON_EDITABLE_FIELDS) | set(role_fields)
        unknown = [field for field in changes if field not in allowed]
        if unknown:
            raise ValidationError(
                f"Fields not editable for {profile.user_type.value}: {', '.join(unknown)}"
            )

        if not changes:
            return profile

        updated = profile.model_copy(update={**changes, "updated_at": utcnow()})
        patch = updated.to_document(include=[*changes, "updated_at"])
        await self.store.update(self.collection, uid, patch)

        await self.analytics.log_event("profile_updated", user_id=uid)
        return updated

    async def upload_profile_image(
        self,
        uid: str,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None
    ) -> str:
        """Store a profile image and point the profile at it"""
        if self.object_store is None:
            raise RuntimeError("Object store not configured")

        extension = Path(filename).suffix.lower()
        if extension not in settings.ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {extension or 'none'}")
        if not data:
            raise ValidationError("Image is empty")
        if len(data) > settings.MAX_UPLOAD_SIZE:
            raise ValidationError("Image exceeds maximum upload size")

        await self.get_profile(uid)

        path = f"{settings.PROFILE_IMAGE_FOLDER}/{uid}_{epoch_millis(utcnow())}{extension}"
        url = await self.object_store.upload(path, data, content_type)
        await self.store.update(self.collection, uid, {"photoURL": url, "updatedAt": utcnow()})

        logger.info(f"Uploaded profile image for {uid}")
        await self.analytics.log_event("profile_image_uploaded", user_id=uid)
        return url

    async def increment_counter(self, uid: str, field: str, amount: float = 1) -> None:
        """Atomically bump one of the profile counters"""
        if field not in COUNTER_FIELDS:
            raise ValueError(f"Unknown counter: {field}")
        await self.store.increment(self.collection, uid, UserProfile.alias_for(field), amount)

    async def list_by_role(self, role: UserRole, limit: Optional[int] = None) -> List[UserProfile]:
        """Directory listing; professionals come best-referrers first"""
        limit = limit or settings.DIRECTORY_LIMIT
        order_by = Ordering("successfulReferrals", descending=True) if role == UserRole.PROFESSIONAL else None
        documents = await self.store.query(
            self.collection,
            filters=[Filter("userType", "==", role.value)],
            order_by=order_by,
            limit=limit
        )
        return [UserProfile.from_document(doc) for doc in documents]

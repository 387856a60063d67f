"""
Security utilities and request dependencies
Resolves Firebase ID tokens to the calling user's profile
"""

from typing import Optional
import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .database import get_store
from .exceptions import AuthorizationError, UnauthorizedException
from referralhub.models.user import UserProfile, UserRole
from referralhub.services.auth_provider import AuthIdentity, AuthProvider, create_auth_provider
from referralhub.services.document_store import DocumentStore
from referralhub.services.storage import ObjectStore, create_object_store

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_auth_provider: Optional[AuthProvider] = None
_object_store: Optional[ObjectStore] = None

def get_auth_provider() -> AuthProvider:
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = create_auth_provider(settings.use_memory_backend)
    return _auth_provider

def get_object_store() -> ObjectStore:
    global _object_store
    if _object_store is None:
        _object_store = create_object_store(settings.use_memory_backend)
    return _object_store

async def close_providers():
    global _auth_provider, _object_store
    if _auth_provider is not None:
        await _auth_provider.close()
        _auth_provider = None
    _object_store = None

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_provider: AuthProvider = Depends(get_auth_provider)
) -> AuthIdentity:
    """Extract and validate user from the bearer ID token"""
    if credentials is None:
        raise UnauthorizedException("Missing authentication credentials")
    return await auth_provider.verify_token(credentials.credentials)

async def get_current_profile(
    identity: AuthIdentity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store)
) -> UserProfile:
    """Profile of the authenticated user"""
    data = await store.get(settings.USERS_COLLECTION, identity.uid)
    if data is None:
        logger.warning(f"No user profile found for UID: {identity.uid}")
        raise UnauthorizedException("User profile not found")
    data.setdefault("uid", identity.uid)
    return UserProfile.from_document(data)

# Role-based access control
def require_role(role: UserRole):
    """Dependency factory that only admits users of one role"""
    async def role_checker(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
        if profile.user_type != role:
            raise AuthorizationError(f"Only {role.value}s can perform this action")
        return profile
    return role_checker

require_student = require_role(UserRole.STUDENT)
require_professional = require_role(UserRole.PROFESSIONAL)

"""
Authentication dependencies
"""

from fastapi import Depends

from referralhub.core.database import get_store
from referralhub.core.security import get_auth_provider
from referralhub.services.auth_provider import AuthProvider
from referralhub.services.document_store import DocumentStore
from referralhub.services.session import AuthSession
from referralhub.services.user_service import ProfileService

async def get_auth_session(
    auth_provider: AuthProvider = Depends(get_auth_provider),
    store: DocumentStore = Depends(get_store)
):
    """Request-scoped session bound to the configured provider"""
    session = AuthSession(auth_provider, ProfileService(store))
    await session.start()
    try:
        yield session
    finally:
        session.stop()

"""Services package"""

from .analytics import AnalyticsService
from .auth_provider import AuthIdentity, AuthProvider, FirebaseAuthProvider, InMemoryAuthProvider
from .document_store import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from .session import AuthSession
from .storage import FirebaseStorageService, InMemoryObjectStore, ObjectStore
from .user_service import ProfileService

__all__ = [
    "AnalyticsService",
    "AuthIdentity",
    "AuthProvider",
    "FirebaseAuthProvider",
    "InMemoryAuthProvider",
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "AuthSession",
    "FirebaseStorageService",
    "InMemoryObjectStore",
    "ObjectStore",
    "ProfileService",
]

"""
Document store configuration and dependency
Selects Firestore or the in-memory store from settings
"""

from typing import Optional
import logging

from .config import settings
from referralhub.services.document_store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)

logger = logging.getLogger(__name__)

_store: Optional[DocumentStore] = None

def create_store() -> DocumentStore:
    """Build the configured document store"""
    if settings.use_memory_backend:
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()
    logger.info("Using Firestore document store")
    return FirestoreDocumentStore()

async def init_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = create_store()
    return _store

async def close_store():
    global _store
    if _store is not None:
        await _store.close()
        _store = None

# Store dependency
async def get_store() -> DocumentStore:
    return await init_store()

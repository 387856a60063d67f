"""Analytics event sink"""

from typing import Any, Dict, Optional
import logging

from referralhub.core.config import settings
from referralhub.models.base import utcnow
from referralhub.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

class AnalyticsService:
    """
    Fire-and-forget analytics events

    Events are appended to the analytics collection. Failures are logged and
    never reach the caller.
    """

    def __init__(self, store: DocumentStore, enabled: Optional[bool] = None):
        self.store = store
        self.enabled = settings.ANALYTICS_ENABLED if enabled is None else enabled

    async def log_event(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ) -> None:
        """Record an analytics event"""
        if not self.enabled:
            return

        event = {
            "name": name,
            "params": params or {},
            "userId": user_id,
            "createdAt": utcnow(),
        }
        try:
            await self.store.add(settings.ANALYTICS_COLLECTION, event)
        except Exception as e:
            logger.warning(f"Dropped analytics event {name}: {str(e)}")

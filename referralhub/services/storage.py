"""
File storage service using Firebase Cloud Storage
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import asyncio
import logging

from google.api_core import exceptions as google_exceptions

from referralhub.core.exceptions import RemoteError

logger = logging.getLogger(__name__)

class ObjectStore(ABC):
    """Binary object storage returning retrievable URLs"""

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> str:
        """Upload bytes to path and return a URL for them"""

class FirebaseStorageService(ObjectStore):
    """Storage service for file uploads"""

    def __init__(self, bucket=None):
        if bucket is None:
            from firebase_admin import storage
            from referralhub.core.firebase import initialize_firebase

            bucket = storage.bucket(app=initialize_firebase())
        self.bucket = bucket

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> str:
        """
        Upload object to the configured bucket

        Args:
            path: Object path inside the bucket
            data: Raw bytes
            content_type: MIME type stored with the object

        Returns:
            Public URL of the uploaded object
        """
        try:
            # Run in thread pool
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None,
                self._upload_sync,
                path,
                data,
                content_type
            )
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Failed to upload object {path}: {str(e)}")
            raise RemoteError(f"Object upload failed: {e}")

    def _upload_sync(self, path: str, data: bytes, content_type: Optional[str]) -> str:
        """Upload object synchronously"""
        blob = self.bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url

class InMemoryObjectStore(ObjectStore):
    """Keeps uploaded objects in memory"""

    def __init__(self, bucket_name: str = "local"):
        self.bucket_name = bucket_name
        self.objects: Dict[str, bytes] = {}

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> str:
        self.objects[path] = data
        return f"memory://{self.bucket_name}/{path}"

def create_object_store(use_memory: bool) -> ObjectStore:
    if use_memory:
        return InMemoryObjectStore()
    return FirebaseStorageService()

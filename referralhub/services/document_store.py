"""
Document store service
Thin wrapper over Firestore with an in-memory twin for tests and local runs
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional
import asyncio
import copy
import functools
import logging
import uuid

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from referralhub.core.exceptions import NotFoundError, RemoteError

logger = logging.getLogger(__name__)

class Filter(NamedTuple):
    field: str
    op: str
    value: Any

class Ordering(NamedTuple):
    field: str
    descending: bool = False

class PreconditionFailed(Exception):
    """Raised when a conditional update finds a different field value"""

    def __init__(self, field: str, expected: Iterable[Any], current: Any):
        super().__init__(f"{field} is {current!r}, expected one of {list(expected)!r}")
        self.field = field
        self.expected = list(expected)
        self.current = current

class DocumentExists(Exception):
    """Raised when creating a document whose id is already taken"""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} already exists")
        self.collection = collection
        self.doc_id = doc_id

class DocumentStore(ABC):
    """Schemaless key/value document store"""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document, None when missing"""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document"""

    @abstractmethod
    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """
        Create a document only if the id is free

        Raises:
            DocumentExists: If a document with doc_id already exists
        """

    @abstractmethod
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a generated id and return the id"""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge fields into an existing document"""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[Ordering] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Run a filtered, ordered, limited query"""

    @abstractmethod
    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        amount: float = 1
    ) -> None:
        """Atomically add amount to a numeric field"""

    @abstractmethod
    async def compare_and_update(
        self,
        collection: str,
        doc_id: str,
        field: str,
        expected: Iterable[Any],
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply data only if the current value of field is in expected

        Runs as a single transaction and returns the updated document.

        Raises:
            NotFoundError: If the document does not exist
            PreconditionFailed: If field holds another value
        """

    async def close(self) -> None:
        pass

class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore through firebase_admin"""

    def __init__(self, client=None):
        if client is None:
            from firebase_admin import firestore
            from referralhub.core.firebase import initialize_firebase

            client = firestore.client(initialize_firebase())
        self.client = client

    async def _run(self, func: Callable, *args) -> Any:
        """Run a blocking SDK call in the thread pool"""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(func, *args))
        except google_exceptions.NotFound as e:
            raise NotFoundError(str(e.message))
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore call failed: {str(e)}")
            raise RemoteError(f"Document store call failed: {e}")

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        def _get():
            snapshot = self.client.collection(collection).document(doc_id).get()
            return snapshot.to_dict() if snapshot.exists else None
        return await self._run(_get)

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await self._run(self.client.collection(collection).document(doc_id).set, data)

    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        def _create():
            try:
                self.client.collection(collection).document(doc_id).create(data)
            except google_exceptions.AlreadyExists:
                raise DocumentExists(collection, doc_id)
        await self._run(_create)

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        def _add():
            _, ref = self.client.collection(collection).add(data)
            return ref.id
        return await self._run(_add)

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await self._run(self.client.collection(collection).document(doc_id).update, data)

    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[Ordering] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        from firebase_admin import firestore

        def _query():
            query = self.client.collection(collection)
            for f in filters:
                query = query.where(filter=FieldFilter(f.field, f.op, f.value))
            if order_by:
                direction = firestore.Query.DESCENDING if order_by.descending else firestore.Query.ASCENDING
                query = query.order_by(order_by.field, direction=direction)
            if limit:
                query = query.limit(limit)
            return [snapshot.to_dict() for snapshot in query.stream()]
        return await self._run(_query)

    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        amount: float = 1
    ) -> None:
        from firebase_admin import firestore

        await self._run(
            self.client.collection(collection).document(doc_id).update,
            {field: firestore.Increment(amount)}
        )

    async def compare_and_update(
        self,
        collection: str,
        doc_id: str,
        field: str,
        expected: Iterable[Any],
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        from firebase_admin import firestore

        expected = list(expected)
        ref = self.client.collection(collection).document(doc_id)

        @firestore.transactional
        def _apply(transaction):
            snapshot = ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            current = snapshot.to_dict()
            if current.get(field) not in expected:
                raise PreconditionFailed(field, expected, current.get(field))
            transaction.update(ref, data)
            current.update(data)
            return current

        return await self._run(_apply, self.client.transaction())

class InMemoryDocumentStore(DocumentStore):
    """Process-local document store with the same semantics as Firestore"""

    _OPERATORS = {
        "==": lambda a, b: a == b,
        "!=": lambda a, b: a != b,
        "<": lambda a, b: a is not None and a < b,
        "<=": lambda a, b: a is not None and a <= b,
        ">": lambda a, b: a is not None and a > b,
        ">=": lambda a, b: a is not None and a >= b,
        "in": lambda a, b: a in b,
        "not-in": lambda a, b: a not in b,
        "array_contains": lambda a, b: isinstance(a, list) and b in a,
    }

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            self._collection(collection)[doc_id] = copy.deepcopy(data)

    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            documents = self._collection(collection)
            if doc_id in documents:
                raise DocumentExists(collection, doc_id)
            documents[doc_id] = copy.deepcopy(data)

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        await self.set(collection, doc_id, data)
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            doc.update(copy.deepcopy(data))

    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[Ordering] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        filters = list(filters)
        for f in filters:
            if f.op not in self._OPERATORS:
                raise ValueError(f"Unsupported filter operator: {f.op}")

        results = [
            copy.deepcopy(doc)
            for doc in self._collection(collection).values()
            if all(self._OPERATORS[f.op](doc.get(f.field), f.value) for f in filters)
        ]

        if order_by:
            # Firestore drops documents missing the ordered field
            results = [doc for doc in results if doc.get(order_by.field) is not None]
            results.sort(key=lambda doc: doc[order_by.field], reverse=order_by.descending)
        if limit:
            results = results[:limit]
        return results

    async def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        amount: float = 1
    ) -> None:
        async with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            doc[field] = (doc.get(field) or 0) + amount

    async def compare_and_update(
        self,
        collection: str,
        doc_id: str,
        field: str,
        expected: Iterable[Any],
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        expected = list(expected)
        async with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            if doc.get(field) not in expected:
                raise PreconditionFailed(field, expected, doc.get(field))
            doc.update(copy.deepcopy(data))
            return copy.deepcopy(doc)

"""
Document session: a unit of work over a document store.

Stores and deletes are queued on the session and applied together by
``save_changes``. Queries always read committed state; ``load`` also sees
the session's own pending changes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from membership.core.logging import get_logger
from membership.infrastructure.documents.document import (
    Document,
    generate_document_id,
)

logger = get_logger(__name__)

TDocument = TypeVar("TDocument", bound=Document)

SortSpec = Sequence[Tuple[str, int]]


class DocumentSession(ABC):
    """Unit of work over documents; one instance per request."""

    def __init__(self):
        self._pending_stores: Dict[Tuple[str, str], Document] = {}
        self._pending_deletes: Dict[Tuple[str, str], Type[Document]] = {}

    @staticmethod
    def _key(document: Document) -> Tuple[str, str]:
        return (document.collection_name, document.id)

    @property
    def has_pending_changes(self) -> bool:
        """Whether stores or deletes are waiting for ``save_changes``."""
        return bool(self._pending_stores or self._pending_deletes)

    def store(self, document: Document) -> None:
        """
        Queue a document for upsert, assigning an identity if it has none.

        Args:
            document: Document to persist on the next ``save_changes``
        """
        if document.id is None:
            document.id = generate_document_id()
        key = self._key(document)
        self._pending_deletes.pop(key, None)
        self._pending_stores[key] = document

    def delete(self, document: Document) -> None:
        """
        Queue a document for removal.

        Args:
            document: Stored document to remove on the next ``save_changes``
        """
        if document.id is None:
            raise ValueError("Cannot delete a document without an id")
        key = self._key(document)
        self._pending_stores.pop(key, None)
        self._pending_deletes[key] = type(document)

    def evict(self, document: Document) -> None:
        """Forget any pending change queued for the document."""
        if document.id is None:
            return
        key = self._key(document)
        self._pending_stores.pop(key, None)
        self._pending_deletes.pop(key, None)

    async def load(
        self, model: Type[TDocument], document_id: str
    ) -> Optional[TDocument]:
        """
        Load a document by identity.

        Args:
            model: Document type to load
            document_id: Document identity

        Returns:
            The document, or None if it does not exist or is pending deletion
        """
        key = (model.collection_name, document_id)
        if key in self._pending_deletes:
            return None
        if key in self._pending_stores:
            return self._pending_stores[key]

        raw = await self._find_one(model.collection_name, {"_id": document_id})
        return model.from_document(raw) if raw is not None else None

    async def query(
        self,
        model: Type[TDocument],
        filter: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[TDocument]:
        """
        Query committed documents.

        Args:
            model: Document type to query
            filter: MongoDB-style filter
            sort: Optional list of (field, direction) pairs
            skip: Number of documents to skip
            limit: Maximum number of documents to return

        Returns:
            Matching documents
        """
        raw_documents = await self._find(
            model.collection_name, filter, sort=sort, skip=skip, limit=limit
        )
        return [model.from_document(raw) for raw in raw_documents]

    async def first_or_default(
        self,
        model: Type[TDocument],
        filter: Dict[str, Any],
        sort: Optional[SortSpec] = None,
    ) -> Optional[TDocument]:
        """Return the first matching document, or None."""
        documents = await self.query(model, filter, sort=sort, limit=1)
        return documents[0] if documents else None

    async def count(self, model: Type[TDocument], filter: Dict[str, Any]) -> int:
        """Count committed documents matching the filter."""
        return await self._count(model.collection_name, filter)

    async def save_changes(self) -> None:
        """Apply pending upserts and deletes, then clear the unit of work."""
        stores = list(self._pending_stores.values())
        deletes = list(self._pending_deletes.keys())

        for document in stores:
            await self._replace(document.collection_name, document.id, document.to_document())
        for collection_name, document_id in deletes:
            await self._remove(collection_name, document_id)

        self._pending_stores.clear()
        self._pending_deletes.clear()
        logger.debug(
            "Session changes saved", stored=len(stores), deleted=len(deletes)
        )

    @abstractmethod
    async def _find_one(
        self, collection_name: str, filter: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def _find(
        self,
        collection_name: str,
        filter: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def _count(self, collection_name: str, filter: Dict[str, Any]) -> int:
        ...

    @abstractmethod
    async def _replace(
        self, collection_name: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        ...

    @abstractmethod
    async def _remove(self, collection_name: str, document_id: str) -> None:
        ...

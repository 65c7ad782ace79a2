"""In-memory document store and session for tests and local runs."""

import copy
import re
from typing import Any, Dict, List, Optional

from membership.infrastructure.documents.session import DocumentSession, SortSpec


class InMemoryDocumentStore:
    """
    Dictionary-backed document storage shared by in-memory sessions.

    Thread safety: NOT thread-safe
    Persistence: Documents lost on process restart

    Example:
        >>> store = InMemoryDocumentStore()
        >>> session = InMemoryDocumentSession(store)
    """

    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        """Get a collection, creating it on first access."""
        return self.collections.setdefault(name, {})

    def clear(self) -> None:
        """Remove every document from every collection."""
        self.collections.clear()

    def count(self, name: str) -> int:
        """Number of documents stored in a collection."""
        return len(self.collections.get(name, {}))


def _matches_condition(value: Any, condition: Any) -> bool:
    if not isinstance(condition, dict):
        return value == condition

    for operator, operand in condition.items():
        if operator == "$eq":
            if value != operand:
                return False
        elif operator == "$ne":
            if value == operand:
                return False
        elif operator == "$in":
            if value not in operand:
                return False
        elif operator == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(operand, value, flags):
                return False
        elif operator == "$options":
            continue
        else:
            raise ValueError(f"Unsupported query operator: {operator}")
    return True


def matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    """Evaluate a MongoDB-style filter against a document."""
    return all(
        _matches_condition(document.get(field), condition)
        for field, condition in filter.items()
    )


class InMemoryDocumentSession(DocumentSession):
    """Document session over an ``InMemoryDocumentStore``."""

    def __init__(self, store: InMemoryDocumentStore):
        super().__init__()
        self.store_backend = store

    async def _find_one(
        self, collection_name: str, filter: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        found = await self._find(collection_name, filter, limit=1)
        return found[0] if found else None

    async def _find(
        self,
        collection_name: str,
        filter: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        documents = [
            document
            for document in self.store_backend.collection(collection_name).values()
            if matches(document, filter)
        ]

        # Apply sort keys last-to-first so the first key is the primary order
        for field, direction in reversed(list(sort or [])):
            documents.sort(
                key=lambda d: (d.get(field) is None, d.get(field)),
                reverse=direction < 0,
            )

        documents = documents[skip:]
        if limit is not None:
            documents = documents[:limit]
        return copy.deepcopy(documents)

    async def _count(self, collection_name: str, filter: Dict[str, Any]) -> int:
        return len(await self._find(collection_name, filter))

    async def _replace(
        self, collection_name: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        self.store_backend.collection(collection_name)[document_id] = copy.deepcopy(
            document
        )

    async def _remove(self, collection_name: str, document_id: str) -> None:
        self.store_backend.collection(collection_name).pop(document_id, None)

"""
MongoDB document session backed by motor.
"""

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from membership.infrastructure.documents.session import DocumentSession, SortSpec


class MotorDocumentSession(DocumentSession):
    """
    Document session over a motor database.

    Example:
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017", tz_aware=True)
        >>> session = MotorDocumentSession(client["membership"])
        >>> session.store(account)
        >>> await session.save_changes()
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__()
        self.database = database

    async def _find_one(
        self, collection_name: str, filter: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return await self.database[collection_name].find_one(filter)

    async def _find(
        self,
        collection_name: str,
        filter: Dict[str, Any],
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        cursor = self.database[collection_name].find(filter)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit)

    async def _count(self, collection_name: str, filter: Dict[str, Any]) -> int:
        return await self.database[collection_name].count_documents(filter)

    async def _replace(
        self, collection_name: str, document_id: str, document: Dict[str, Any]
    ) -> None:
        await self.database[collection_name].replace_one(
            {"_id": document_id}, document, upsert=True
        )

    async def _remove(self, collection_name: str, document_id: str) -> None:
        await self.database[collection_name].delete_one({"_id": document_id})
